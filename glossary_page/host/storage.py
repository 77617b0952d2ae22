from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import Column, DateTime, String, create_engine, delete
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


class SettingModel(Base):
    __tablename__ = "settings"
    key = Column(String, primary_key=True)
    value = Column(String)
    updated_at = Column(DateTime)


class KeyValueStore:
    """
    Durable string settings owned by the host (what `localStorage` is
    for a page in a browser). Implementations may raise on access failure;
    callers decide how to degrade.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """
    Simple in-memory store for local runs and tests.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def clear(self, key: str) -> None:
        self.values.pop(key, None)


class SqlAlchemyKeyValueStore(KeyValueStore):
    """
    SQL-backed store using SQLAlchemy. Works with SQLite/Postgres URLs.
    """

    def __init__(self, database_url: str):
        self.engine = create_engine(database_url, future=True)
        Base.metadata.create_all(self.engine)
        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False, future=True)

    def _session(self) -> Session:
        return self.SessionLocal()

    def get(self, key: str) -> Optional[str]:
        with self._session() as session:
            model = session.get(SettingModel, key)
            return model.value if model else None

    def set(self, key: str, value: str) -> None:
        with self._session() as session:
            session.merge(SettingModel(key=key, value=value, updated_at=datetime.utcnow()))
            session.commit()

    def clear(self, key: str) -> None:
        with self._session() as session:
            session.execute(delete(SettingModel).where(SettingModel.key == key))
            session.commit()
