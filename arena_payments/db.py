import uuid
from datetime import datetime, UTC
from enum import Enum
from typing import Iterable

from arena_payments.database import SessionLocal
from arena_payments.logging_config import get_logger
from arena_payments.models import models


logger = get_logger(__name__)


def _name(collection: str | Enum) -> str:
    return collection.value if isinstance(collection, Enum) else collection


class RecordStore:
    """
    Key-value record store partitioned by arena id (or the global partition).

    Upsert is a whole-record replace keyed on the record's ``id``; there are no
    transactions spanning calls, so concurrent writers get last-write-wins.
    """

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    async def select(self, collection: str | Enum, partition: str) -> list[dict]:
        with self.session_factory() as db:
            rows = (
                db.query(models.Record)
                .filter(models.Record.collection == _name(collection))
                .filter(models.Record.partition == partition)
                .order_by(models.Record.id)
                .all()
            )
            return [dict(row.data) for row in rows]

    async def get(self, collection: str | Enum, record_id: str, partition: str) -> dict | None:
        with self.session_factory() as db:
            row = (
                db.query(models.Record)
                .filter_by(collection=_name(collection), partition=partition, record_id=record_id)
                .first()
            )
            return dict(row.data) if row else None

    async def upsert(self, collection: str | Enum, records: Iterable[dict], partition: str) -> list[dict]:
        saved: list[dict] = []
        with self.session_factory() as db:
            for item in records:
                data = dict(item)
                if not data.get("id"):
                    data["id"] = str(uuid.uuid4())
                if not data.get("created_at"):
                    data["created_at"] = datetime.now(UTC).isoformat()
                existing = (
                    db.query(models.Record)
                    .filter_by(collection=_name(collection), partition=partition, record_id=data["id"])
                    .first()
                )
                if existing:
                    existing.data = data
                    db.add(existing)
                else:
                    db.add(models.Record(
                        collection=_name(collection),
                        partition=partition,
                        record_id=data["id"],
                        data=data,
                    ))
                saved.append(data)
            db.commit()
        logger.info("Upserted %s record(s) into %s partition=%s", len(saved), _name(collection), partition)
        return saved
