"""
FastAPI dependencies shared by the routers
"""
import logging
from typing import Optional

from fastapi import Header, HTTPException, status

from hms.config import settings
from hms.exceptions import HMSError, NotFoundError, InvalidStateError
from hms.services.store import HotelStore
from hms.storage.backends import MemoryBackend, SqlBackend

logger = logging.getLogger(__name__)

_store: Optional[HotelStore] = None


def build_store() -> HotelStore:
    """Store on the configured medium"""
    if settings.STORAGE_BACKEND == "memory":
        backend = MemoryBackend()
    elif settings.STORAGE_BACKEND == "sql":
        backend = SqlBackend()
    else:
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
    logger.info(f"Using {settings.STORAGE_BACKEND} storage backend")
    return HotelStore(backend)


def get_store() -> HotelStore:
    """Dependency injection: process-wide store"""
    global _store
    if _store is None:
        _store = build_store()
    return _store


def get_operator(x_operator: Optional[str] = Header(default=None)) -> str:
    """Opaque operator name recorded on payments and audit entries"""
    return (x_operator or "").strip() or settings.DEFAULT_OPERATOR


def http_error(error: HMSError) -> HTTPException:
    """Map a domain error to its HTTP status"""
    if isinstance(error, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, InvalidStateError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(error))
