"""Common type aliases for the MedShift backend API."""
from typing import Any, Union

# One row as it travels over the wire (camelCase key -> value)
ShiftRecord = dict[str, Any]
TargetRecord = dict[str, Any]
LocationRecord = dict[str, Any]

# List aliases
ShiftList = list[ShiftRecord]
TargetList = list[TargetRecord]
LocationList = list[LocationRecord]

# POST bodies accept a single object or an array of objects
UpsertBody = Union[dict[str, Any], list[dict[str, Any]]]
