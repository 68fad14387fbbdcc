from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from bson.binary import Binary
from pymongo import ASCENDING

from application.ports.embedding_store import EmbeddingStore
from domain.exceptions import CorruptDataError
from domain.value_objects.embedding_record import EmbeddingRecord
from infrastructure.serialization.vector_codec import encode_vector, parse_stored_vector

if TYPE_CHECKING:
    from motor.motor_asyncio import AsyncIOMotorClient

    from infrastructure.config import Settings

logger = structlog.get_logger()


def _to_document(record: EmbeddingRecord) -> dict[str, Any]:
    return {
        "note_id": record.note_id,
        "model": record.model,
        "vector": Binary(encode_vector(record.vector)),
        "dimensions": record.dimensions,
        "content_hash": record.content_hash,
        "computed_at": record.computed_at,
    }


def _to_record(doc: dict[str, Any]) -> EmbeddingRecord:
    """Rehydrate a stored document, normalizing binary and legacy JSON vectors.

    Raises:
        CorruptDataError: If the vector or its metadata cannot be trusted

    """
    vector = parse_stored_vector(doc.get("vector")).to_vector()

    try:
        dimensions = int(doc["dimensions"])
    except (KeyError, TypeError, ValueError) as e:
        msg = f"Stored embedding for note {doc.get('note_id')} has no usable dimensions field"
        raise CorruptDataError(msg) from e

    if dimensions != len(vector):
        msg = (
            f"Stored embedding for note {doc.get('note_id')} declares {dimensions} "
            f"dimensions but holds {len(vector)}"
        )
        raise CorruptDataError(msg)

    computed_at = doc.get("computed_at") or datetime.now(UTC)
    if isinstance(computed_at, datetime) and computed_at.tzinfo is None:
        computed_at = computed_at.replace(tzinfo=UTC)

    try:
        return EmbeddingRecord(
            note_id=doc["note_id"],
            vector=vector,
            model=doc["model"],
            dimensions=dimensions,
            content_hash=doc.get("content_hash", ""),
            computed_at=computed_at,
        )
    except (KeyError, ValueError) as e:
        msg = f"Stored embedding for note {doc.get('note_id')} is invalid: {e!s}"
        raise CorruptDataError(msg) from e


class MongoEmbeddingStore(EmbeddingStore):
    """Adapter persisting embedding records in a MongoDB collection.

    One document per (note_id, model); vectors are stored as binary in the
    little-endian float32 layout. Upserts rely on MongoDB's atomic
    single-document writes, so concurrent writers converge to last write wins.

    The unique (note_id, model) index is created before the first write of
    each store instance; every put waits for it, so concurrent upserts of the
    same key can never insert two documents.
    """

    def __init__(self, client: AsyncIOMotorClient, settings: Settings) -> None:
        self.client = client
        self.db = self.client[settings.mongo_db]
        self.embeddings = self.db[settings.mongo_embeddings_collection]

        self._indexes_ready = False
        self._indexes_lock = asyncio.Lock()

    async def ensure_indexes(self) -> None:
        """Create the store's indexes. Idempotent; later calls are no-ops."""
        if self._indexes_ready:
            return
        async with self._indexes_lock:
            if self._indexes_ready:
                return
            await self.embeddings.create_index(
                [("note_id", ASCENDING), ("model", ASCENDING)],
                unique=True,
            )
            await self.embeddings.create_index([("model", ASCENDING)])
            self._indexes_ready = True
            logger.info("embedding_indexes_ensured")

    async def get(self, note_id: int, model: str) -> EmbeddingRecord | None:
        doc = await self.embeddings.find_one({"note_id": note_id, "model": model})
        if not doc:
            return None
        return _to_record(doc)

    async def put(self, record: EmbeddingRecord) -> None:
        await self.ensure_indexes()
        await self.embeddings.update_one(
            {"note_id": record.note_id, "model": record.model},
            {"$set": _to_document(record)},
            upsert=True,
        )

    async def all_for_model(self, model: str) -> list[EmbeddingRecord]:
        cursor = self.embeddings.find({"model": model}).sort("note_id", ASCENDING)
        records = []
        async for doc in cursor:
            try:
                records.append(_to_record(doc))
            except CorruptDataError as e:
                logger.warning(
                    "skipping_corrupt_embedding",
                    note_id=doc.get("note_id"),
                    model=model,
                    error=str(e),
                )
        return records

    async def count_by_model(self) -> dict[str, int]:
        cursor = self.embeddings.aggregate(
            [{"$group": {"_id": "$model", "count": {"$sum": 1}}}],
        )
        counts: dict[str, int] = {}
        async for doc in cursor:
            counts[doc["_id"]] = doc["count"]
        return counts
