"""API Routers package."""
from . import shifts, targets, locations, views

__all__ = ['shifts', 'targets', 'locations', 'views']
