"""
Store Factory for Coffee Log.

Creates the configured record store. The store is built once at startup
and passed to whatever needs it; nothing holds it as a module global.
"""

import logging
from typing import Optional, TYPE_CHECKING

from coffeelog.config import Settings
from coffeelog.paths import get_data_dir
from coffeelog.storage.file_backend import FileBackend
from coffeelog.storage.memory_backend import MemoryBackend

if TYPE_CHECKING:
    from coffeelog.storage.protocol import RecordStore

logger = logging.getLogger(__name__)

BACKEND_TYPES = ("file", "memory", "supabase")


def create_store(settings: Settings, force_backend: Optional[str] = None,
                 supabase_client=None) -> "RecordStore":
    """
    Create a record store instance.

    Args:
        settings: Application settings
        force_backend: Override the configured backend type
        supabase_client: Optional Supabase client for cloud storage

    Returns:
        RecordStore instance (FileBackend, MemoryBackend or SupabaseBackend)
    """
    backend_type = force_backend or settings.storage_backend
    if backend_type not in BACKEND_TYPES:
        raise ValueError(
            f"Unknown storage backend '{backend_type}'. "
            f"Expected one of: {', '.join(BACKEND_TYPES)}"
        )

    logger.info(f"Using '{backend_type}' record store")

    if backend_type == "supabase":
        # Imported here so the supabase client is only loaded when configured
        from coffeelog.storage.supabase_backend import SupabaseBackend

        return SupabaseBackend(
            table_name=settings.table_name,
            client=supabase_client,
            supabase_url=settings.supabase_url,
            supabase_key=settings.supabase_key
        )
    if backend_type == "memory":
        return MemoryBackend()

    data_dir = settings.data_dir or str(get_data_dir())
    return FileBackend(data_dir)
