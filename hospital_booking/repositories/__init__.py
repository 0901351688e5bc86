import logging

from .base import AppointmentStore
from .json_file import JsonFileAppointmentStore
from .memory import MemoryAppointmentStore
from .sql import SqlAppointmentStore

logger = logging.getLogger(__name__)

def build_store(settings, catalog) -> AppointmentStore:
    """Create the store selected by ``settings.STORE_BACKEND``."""
    backend = settings.STORE_BACKEND.lower()

    if backend == "memory":
        store = MemoryAppointmentStore()
    elif backend == "file":
        store = JsonFileAppointmentStore(settings.DATA_FILE, catalog.list_doctors())
    elif backend == "database":
        from ..core.database import SessionLocal, init_db

        init_db()
        store = SqlAppointmentStore(SessionLocal)
    else:
        raise ValueError(
            f"Unknown STORE_BACKEND '{settings.STORE_BACKEND}'. Use memory, file or database"
        )

    logger.info(f"Using {backend} appointment store")
    return store

__all__ = [
    "AppointmentStore",
    "JsonFileAppointmentStore",
    "MemoryAppointmentStore",
    "SqlAppointmentStore",
    "build_store",
]
