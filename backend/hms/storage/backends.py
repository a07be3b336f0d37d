"""
Key-value persistence media
The store serialises whole collections to JSON strings and hands them to a backend;
a backend only knows about string keys and string values.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.orm import sessionmaker

from hms.database import Base, SessionLocal

logger = logging.getLogger(__name__)


class KeyValueEntry(Base):
    """One persisted key (rooms, bookings, ...) holding a JSON document"""
    __tablename__ = "hms_storage"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)


class KeyValueBackend(ABC):
    """Minimal get/set/delete contract every medium implements"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    def keys(self) -> List[str]:
        return []


class MemoryBackend(KeyValueBackend):
    """Process-local dict, used by tests and demos"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._data.keys())


class SqlBackend(KeyValueBackend):
    """
    SQLAlchemy-backed medium: one row per key in hms_storage.
    Each call opens and commits its own short session.
    """

    def __init__(self, bind=None, session_factory=None):
        if session_factory is None:
            if bind is None:
                session_factory = SessionLocal
            else:
                session_factory = sessionmaker(autocommit=False, autoflush=False, bind=bind)
        self._session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        db = self._session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            return entry.value if entry else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            entry = db.query(KeyValueEntry).filter(KeyValueEntry.key == key).first()
            if entry:
                entry.value = value
                entry.updated_at = datetime.now()
            else:
                db.add(KeyValueEntry(key=key, value=value))
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to persist key '{key}'", exc_info=True)
            raise
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self._session_factory()
        try:
            db.query(KeyValueEntry).filter(KeyValueEntry.key == key).delete()
            db.commit()
        except Exception:
            db.rollback()
            logger.error(f"Failed to delete key '{key}'", exc_info=True)
            raise
        finally:
            db.close()

    def keys(self) -> List[str]:
        db = self._session_factory()
        try:
            return [row.key for row in db.query(KeyValueEntry.key).all()]
        finally:
            db.close()
