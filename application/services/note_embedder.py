"""Keeps a note's stored embedding in step with its text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from domain.exceptions import CorruptDataError
from domain.services.content_fingerprint import fingerprint
from domain.value_objects.embedding_record import EmbeddingRecord

if TYPE_CHECKING:
    from application.ports.embedding_provider import EmbeddingProvider, EmbeddingProviderSelector
    from application.ports.embedding_store import EmbeddingStore
    from application.ports.note_text_extractor import NoteTextExtractor
    from domain.value_objects.clinical_note import ClinicalNote

logger = structlog.get_logger()


@dataclass(frozen=True)
class EmbeddingRefresh:
    """The current record of a note and whether this call had to compute it."""

    record: EmbeddingRecord
    recomputed: bool


class NoteEmbedder:
    """Ensures a note has a current embedding under the active model.

    Lifecycle of a note's record: Absent -> Computing -> Current, and
    Current -> Stale when the extracted text changes. A failed computation
    writes nothing, leaving the store in its prior state; the error is raised
    to the caller. The record is only written after the provider returned,
    so a cancelled call leaves no partial record behind.
    """

    def __init__(
        self,
        provider_selector: EmbeddingProviderSelector,
        embedding_store: EmbeddingStore,
        text_extractor: NoteTextExtractor,
    ) -> None:
        self.provider_selector = provider_selector
        self.embedding_store = embedding_store
        self.text_extractor = text_extractor

    async def ensure_current(
        self,
        note: ClinicalNote,
        force: bool = False,
        provider: EmbeddingProvider | None = None,
    ) -> EmbeddingRefresh:
        """Return the note's current record, computing and storing it if needed.

        Args:
            note: The note to embed
            force: If True, recompute even if the stored record is current
            provider: Provider to use; resolved from the selector when omitted

        Raises:
            EmbeddingProviderError: If the provider fails (nothing is stored)

        """
        if provider is None:
            provider = self.provider_selector.current()
        model = provider.model_name

        text = self.text_extractor.extract_text(note)
        content_hash = fingerprint(text)

        existing: EmbeddingRecord | None = None
        try:
            existing = await self.embedding_store.get(note.id, model)
        except CorruptDataError as e:
            logger.warning(
                "stored_embedding_corrupt",
                note_id=note.id,
                model=model,
                error=str(e),
            )
            reason = "corrupt"
        else:
            if existing is None:
                reason = "absent"
            elif not existing.is_current_for(content_hash, model):
                reason = "stale"
            elif force:
                reason = "forced"
            else:
                logger.debug("embedding_current", note_id=note.id, model=model)
                return EmbeddingRefresh(record=existing, recomputed=False)

        logger.info(
            "computing_note_embedding",
            note_id=note.id,
            model=model,
            reason=reason,
            text_length=len(text),
        )

        result = await provider.embed(text)
        record = EmbeddingRecord.from_result(note.id, result, content_hash)
        await self.embedding_store.put(record)

        logger.info(
            "note_embedding_stored",
            note_id=note.id,
            model=record.model,
            dimensions=record.dimensions,
            content_hash=content_hash,
        )
        return EmbeddingRefresh(record=record, recomputed=True)
