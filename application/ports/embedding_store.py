from typing import Protocol

from domain.value_objects.embedding_record import EmbeddingRecord


class EmbeddingStore(Protocol):
    """Port for persisting one embedding record per (note_id, model).

    Implementations provide atomic single-record upserts; concurrent writers
    to the same key converge to last-write-wins. No multi-record transactions
    are required.
    """

    async def ensure_indexes(self) -> None:
        """Create the unique (note_id, model) index.

        Should be idempotent - safe to call multiple times.
        """
        ...

    async def get(self, note_id: int, model: str) -> EmbeddingRecord | None:
        """Return the current record for a note under a model, or None.

        Raises:
            CorruptDataError: If the stored row cannot be decoded

        """
        ...

    async def put(self, record: EmbeddingRecord) -> None:
        """Insert or replace the record for (record.note_id, record.model)."""
        ...

    async def all_for_model(self, model: str) -> list[EmbeddingRecord]:
        """Return every current record for a model, ordered by note_id.

        Rows that cannot be decoded are skipped rather than failing the call.
        """
        ...

    async def count_by_model(self) -> dict[str, int]:
        """Return the number of stored records per model name."""
        ...
