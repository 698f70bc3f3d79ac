"""
epictrack: terminal tracker for epics and stories.

Data lives in one JSON file. TrackerDatabase loads it, applies a change
and saves it on every call; Navigator drives the interactive pages.
"""

from epictrack.db import JSONFileDatabase, TrackerDatabase
from epictrack.errors import NotFound, ParseError, StorageError, TrackerError, ValidationError
from epictrack.models import Epic, Status, Story
from epictrack.store import IdAllocator, Store

__all__ = [
    "Epic",
    "IdAllocator",
    "JSONFileDatabase",
    "NotFound",
    "ParseError",
    "Status",
    "StorageError",
    "Store",
    "Story",
    "TrackerDatabase",
    "TrackerError",
    "ValidationError",
]
