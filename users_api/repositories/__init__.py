"""
Persistence adapters.

These modules encapsulate how the users collection is stored/retrieved (today
a JSON file). Services depend on the storage interface rather than touching
the file directly.
"""

from .json_storage import JsonUserStorage, StorageError, StorageReadError, StorageWriteError

__all__ = ["JsonUserStorage", "StorageError", "StorageReadError", "StorageWriteError"]
