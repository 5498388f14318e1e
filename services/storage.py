# services/storage.py
import os
from typing import Dict, Optional

from sqlalchemy import create_engine, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from models import Base, StorageEntry


class StorageError(Exception):
    """Raised when the key-value backend cannot be read or written."""


class MemoryStorage:
    """Dict-backed storage; what tests and throwaway sessions use."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class SqlStorage:
    """Key-value storage in a local SQLite file (one row per key)."""

    def __init__(self, db_path: str):
        parent = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(parent, exist_ok=True)
        self.engine = create_engine(f"sqlite:///{db_path}", future=True)
        self.Session = sessionmaker(bind=self.engine)
        Base.metadata.create_all(self.engine)

    def get(self, key: str) -> Optional[str]:
        try:
            with self.Session() as s:
                row = s.execute(select(StorageEntry).filter_by(key=key)).scalar_one_or_none()
                return row.value if row else None
        except SQLAlchemyError as e:
            raise StorageError(f"read failed for {key!r}") from e

    def set(self, key: str, value: str) -> None:
        try:
            with self.Session() as s:
                row = s.execute(select(StorageEntry).filter_by(key=key)).scalar_one_or_none()
                if row is None:
                    s.add(StorageEntry(key=key, value=value))
                else:
                    row.value = value
                s.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"write failed for {key!r}") from e

    def remove(self, key: str) -> None:
        try:
            with self.Session() as s:
                s.query(StorageEntry).filter_by(key=key).delete()
                s.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"delete failed for {key!r}") from e
