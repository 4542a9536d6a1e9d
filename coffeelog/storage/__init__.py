"""
Record store abstraction for Coffee Log.

Supports multiple storage backends:
- FileBackend: Local JSON files (default)
- MemoryBackend: In-process dictionary, for tests
- SupabaseBackend: Cloud PostgreSQL table
"""

from coffeelog.storage.protocol import RecordStore
from coffeelog.storage.file_backend import FileBackend
from coffeelog.storage.memory_backend import MemoryBackend
from coffeelog.storage.factory import create_store

__all__ = [
    'RecordStore',
    'FileBackend',
    'MemoryBackend',
    'create_store',
]
