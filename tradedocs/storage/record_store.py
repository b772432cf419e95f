# tradedocs/storage/record_store.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, Index, String, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Mapped, mapped_column, sessionmaker

from tradedocs.db import Base, engine_from_settings, make_engine, make_session_factory
from tradedocs.errors import RecordNotFound, ValidationError

logger = logging.getLogger(__name__)

COLLECTIONS = (
    "invoices",
    "inspectionRequests",
    "suppliers",
    "clients",
    "clientSupplierLicenses",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class StoredRecord(Base):
    """
    One schemaless record of a named collection. Field values live in the
    JSON column; the id is client-generated.
    """
    __tablename__ = "records"

    collection: Mapped[str] = mapped_column(String(64), primary_key=True)
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    data: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index("idx_records_collection_created", "collection", "created_at"),
    )

    def as_record(self) -> Dict[str, Any]:
        return {**(self.data or {}), "id": self.id}


def _check_collection(collection: str) -> None:
    if collection not in COLLECTIONS:
        raise ValidationError(f"Unknown collection: {collection!r}")


class RecordStore:
    """
    Whole-collection reads, insert-or-update and delete by id. Filtering
    happens in the caller.
    """

    def __init__(self, session_factory: sessionmaker):
        self._sessions = session_factory

    @classmethod
    def from_engine(cls, engine: Engine, *, create_tables: bool = True) -> "RecordStore":
        if create_tables:
            Base.metadata.create_all(engine)
        return cls(make_session_factory(engine))

    @classmethod
    def from_url(cls, database_url: str, *, create_tables: bool = True) -> "RecordStore":
        return cls.from_engine(make_engine(database_url), create_tables=create_tables)

    def list(self, collection: str) -> List[Dict[str, Any]]:
        _check_collection(collection)
        with self._sessions() as db:
            rows = db.execute(
                select(StoredRecord)
                .where(StoredRecord.collection == collection)
                .order_by(StoredRecord.created_at.asc(), StoredRecord.id.asc())
            ).scalars().all()
            return [r.as_record() for r in rows]

    def find(self, collection: str, record_id: str | None) -> Optional[Dict[str, Any]]:
        _check_collection(collection)
        if not record_id:
            return None
        with self._sessions() as db:
            row = db.get(StoredRecord, {"collection": collection, "id": record_id})
            return row.as_record() if row else None

    def get(self, collection: str, record_id: str) -> Dict[str, Any]:
        rec = self.find(collection, record_id)
        if rec is None:
            raise RecordNotFound(collection, record_id)
        return rec

    def upsert(self, collection: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert-or-update; given fields are merged over the stored ones.
        """
        _check_collection(collection)
        if not record_id:
            raise ValidationError("Record id is required")
        clean = {k: v for k, v in (fields or {}).items() if k != "id"}

        with self._sessions() as db:
            row = db.get(StoredRecord, {"collection": collection, "id": record_id})
            if row is None:
                row = StoredRecord(collection=collection, id=record_id, data=clean)
                db.add(row)
            else:
                row.data = {**(row.data or {}), **clean}
            db.commit()
            logger.debug("Upserted %s/%s", collection, record_id)
            return row.as_record()

    def create(self, collection: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        return self.upsert(collection, new_id(), fields)

    def delete(self, collection: str, record_id: str) -> bool:
        _check_collection(collection)
        with self._sessions() as db:
            row = db.get(StoredRecord, {"collection": collection, "id": record_id})
            if row is None:
                return False
            db.delete(row)
            db.commit()
            logger.debug("Deleted %s/%s", collection, record_id)
            return True


_store_singleton: RecordStore | None = None


def get_store() -> RecordStore:
    global _store_singleton
    if _store_singleton is None:
        _store_singleton = RecordStore.from_engine(engine_from_settings())
    return _store_singleton
