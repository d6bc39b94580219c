"""
Client data-access helpers: REST calls with a local mirror fallback.

Each resource goes through a Repository with two backends:

  remote – the REST API (httpx)
  local  – a mirror list kept in a StoragePort

Precedence: reads prefer the remote store; when the call fails or comes back
empty the mirror is returned instead, and a non-empty remote list replaces the
mirror wholesale. Writes go to both backends independently. A failed remote
write is logged and dropped (no retry, no queue) and the mirror is not rolled
back.
"""
import logging
import secrets
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from .aggregation import toggle_status
from .storage import MemoryStorage, StoragePort

_logger = logging.getLogger(__name__)

MIRROR_KEY_PREFIX = 'medshift:'
DEFAULT_TIMEOUT = 10.0

Record = Dict[str, Any]

_B36 = '0123456789abcdefghijklmnopqrstuvwxyz'


def _base36(n: int) -> str:
    if n == 0:
        return '0'
    out = []
    while n:
        n, r = divmod(n, 36)
        out.append(_B36[r])
    return ''.join(reversed(out))


def generate_id() -> str:
    """Millisecond timestamp plus a random suffix, both base-36."""
    return _base36(int(time.time() * 1000)) + _base36(secrets.randbelow(36 ** 9)).rjust(9, '0')


class RemoteError(Exception):
    """Transport failure or non-success status from the REST API."""


class RemoteBackend:
    def __init__(self, base_url: str = 'http://localhost:8000',
                 http: Optional[httpx.Client] = None,
                 timeout: float = DEFAULT_TIMEOUT,
                 prefix: str = '/api'):
        self.http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)
        self.prefix = prefix.rstrip('/')

    def _call(self, method: str, path: str, **kw) -> Any:
        url = f"{self.prefix}/{path}"
        try:
            resp = self.http.request(method, url, **kw)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPError as e:
            raise RemoteError(f"{method} {url} failed: {e}") from e
        except ValueError as e:
            raise RemoteError(f"{method} {url} returned invalid JSON") from e

    def list(self, resource: str) -> List[Record]:
        data = self._call('GET', resource)
        if not isinstance(data, list):
            raise RemoteError(f"GET {resource} did not return a list")
        return data

    def upsert(self, resource: str, items: Union[Record, List[Record]]) -> None:
        self._call('POST', resource, json=items)

    def delete(self, resource: str, record_id: str) -> None:
        self._call('DELETE', f"{resource}/{record_id}")

    def ping(self) -> Any:
        return self._call('GET', 'ping')

    def close(self) -> None:
        self.http.close()


class LocalBackend:
    def __init__(self, storage: Optional[StoragePort] = None):
        self.storage = storage if storage is not None else MemoryStorage()

    @staticmethod
    def _key(resource: str) -> str:
        return MIRROR_KEY_PREFIX + resource

    def list(self, resource: str) -> List[Record]:
        data = self.storage.get(self._key(resource), [])
        return list(data) if isinstance(data, list) else []

    def replace(self, resource: str, items: List[Record]) -> None:
        self.storage.set(self._key(resource), list(items))

    def upsert(self, resource: str, items: List[Record]) -> None:
        current = self.list(resource)
        index = {r.get('id'): i for i, r in enumerate(current)}
        for item in items:
            pos = index.get(item.get('id'))
            if pos is None:
                index[item.get('id')] = len(current)
                current.append(dict(item))
            else:
                current[pos] = dict(item)
        self.replace(resource, current)

    def delete(self, resource: str, record_id: str) -> None:
        self.replace(resource, [r for r in self.list(resource) if r.get('id') != record_id])

    def clear(self, resource: str) -> None:
        self.storage.delete(self._key(resource))


class Repository:
    """One resource, remote first with the local mirror as fallback."""

    def __init__(self, resource: str, remote: RemoteBackend, local: LocalBackend):
        self.resource = resource
        self.remote = remote
        self.local = local

    def fetch(self) -> List[Record]:
        try:
            items = self.remote.list(self.resource)
        except RemoteError as e:
            _logger.warning("fetch %s failed, using local mirror: %s", self.resource, e)
            return self.local.list(self.resource)
        if not items:
            return self.local.list(self.resource)
        self.local.replace(self.resource, items)
        return items

    def save(self, items: Union[Record, List[Record]]) -> None:
        batch = items if isinstance(items, list) else [items]
        if not batch:
            return
        try:
            self.remote.upsert(self.resource, items)
        except RemoteError as e:
            _logger.error("save %s failed (not retried): %s", self.resource, e)
        self.local.upsert(self.resource, batch)

    def delete(self, record_id: str) -> None:
        try:
            self.remote.delete(self.resource, record_id)
        except RemoteError as e:
            _logger.error("delete %s/%s failed (not retried): %s", self.resource, record_id, e)
        self.local.delete(self.resource, record_id)

    def get_local(self, record_id: str) -> Optional[Record]:
        for r in self.local.list(self.resource):
            if r.get('id') == record_id:
                return r
        return None


class DataClient:
    """The helpers the views call on create/update/delete."""

    def __init__(self, remote: RemoteBackend, storage: Optional[StoragePort] = None):
        local = LocalBackend(storage)
        self.shifts = Repository('shifts', remote, local)
        self.targets = Repository('targets', remote, local)
        self.locations = Repository('locations', remote, local)

    # ── Shifts ─────────────────────────────────────────────────
    def fetch_shifts(self) -> List[Record]:
        return self.shifts.fetch()

    def save_shift(self, shift: Record) -> None:
        self.shifts.save(shift)

    def save_shifts(self, shifts: List[Record]) -> None:
        self.shifts.save(list(shifts))

    def update_shift(self, shift_id: str, changes: Record) -> Optional[Record]:
        """Apply changes to the mirrored record and save it as a full replace."""
        current = self.shifts.get_local(shift_id)
        if current is None:
            _logger.warning("update_shift: %s not in local mirror", shift_id)
            return None
        updated = {**current, **changes, 'id': shift_id}
        self.shifts.save(updated)
        return updated

    def toggle_payment_status(self, shift_id: str) -> Optional[Record]:
        current = self.shifts.get_local(shift_id)
        if current is None:
            return None
        return self.update_shift(shift_id, {'paymentStatus': toggle_status(current.get('paymentStatus'))})

    def delete_shift(self, shift_id: str) -> None:
        self.shifts.delete(shift_id)

    # ── Targets ────────────────────────────────────────────────
    def fetch_targets(self) -> List[Record]:
        return self.targets.fetch()

    def save_target(self, target: Record) -> None:
        self.targets.save(target)

    # ── Locations ──────────────────────────────────────────────
    def fetch_locations(self) -> List[Record]:
        return self.locations.fetch()

    def save_location(self, location: Record) -> None:
        self.locations.save(location)

    def delete_location(self, location_id: str) -> None:
        self.locations.delete(location_id)
