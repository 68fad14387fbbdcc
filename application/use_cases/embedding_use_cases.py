from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.embedding_dtos import (
    EmbeddingDTO,
    EmbeddingStatsResponse,
    ReindexErrorDTO,
    ReindexSummary,
)
from application.dtos.errors import AppError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from application.ports.embedding_provider import EmbeddingProviderSelector
    from application.ports.embedding_store import EmbeddingStore
    from application.services.note_embedder import NoteEmbedder
    from domain.value_objects.clinical_note import ClinicalNote

logger = structlog.get_logger()


class EmbedNoteUseCase:
    """Use case for computing (or reusing) the embedding of a single note.

    This use case:
    1. Extracts and fingerprints the note text
    2. Reuses the stored record if it matches the text and the active model
    3. Otherwise embeds the text with the active provider and stores the record
    """

    def __init__(self, note_embedder: NoteEmbedder) -> None:
        self.note_embedder = note_embedder

    async def execute(
        self,
        note: ClinicalNote,
        force_regenerate: bool = False,
    ) -> Result[EmbeddingDTO, AppError]:
        """Ensure the note has a current embedding.

        Args:
            note: The note to embed
            force_regenerate: If True, recompute even if the stored record is current

        Returns:
            Result containing EmbeddingDTO on success or AppError on failure

        """
        try:
            logger.info("embed_note_start", note_id=note.id, force=force_regenerate)

            refresh = await self.note_embedder.ensure_current(note, force=force_regenerate)
            record = refresh.record

            logger.info(
                "embed_note_success",
                note_id=note.id,
                model=record.model,
                recomputed=refresh.recomputed,
            )

            return Success(
                EmbeddingDTO(
                    note_id=record.note_id,
                    model_name=record.model,
                    dimensions=record.dimensions,
                    vector=record.vector,
                    content_hash=record.content_hash,
                    computed_at=record.computed_at.isoformat(),
                    recomputed=refresh.recomputed,
                ),
            )

        except Exception as e:
            logger.error(
                "embed_note_failed",
                note_id=note.id,
                error=str(e),
                exc_info=True,
            )
            return Failure(AppError.from_exception(e, f"Failed to embed note {note.id}"))


class ReindexNotesUseCase:
    """Use case for re-embedding a batch of notes under the active provider.

    Meant for a reindex utility after switching providers or models. Notes
    whose stored record is already current are skipped; a failure on one note
    is recorded in the summary and does not stop the batch.
    """

    def __init__(
        self,
        note_embedder: NoteEmbedder,
        provider_selector: EmbeddingProviderSelector,
    ) -> None:
        self.note_embedder = note_embedder
        self.provider_selector = provider_selector

    async def execute(
        self,
        notes: Sequence[ClinicalNote],
        limit: int = 100,
    ) -> Result[ReindexSummary, AppError]:
        try:
            provider = self.provider_selector.current()
        except Exception as e:
            logger.exception("reindex_notes_provider_unavailable", error=str(e))
            return Failure(AppError.from_exception(e, "Failed to select embedding provider"))

        batch = list(notes)[: max(limit, 0)]
        summary = ReindexSummary(
            model_name=provider.model_name,
            provider=provider.provider_name,
            total_notes_to_process=len(batch),
        )

        logger.info(
            "reindex_notes_start",
            count=len(batch),
            model=provider.model_name,
            provider=provider.provider_name,
        )

        for note in batch:
            try:
                refresh = await self.note_embedder.ensure_current(note, provider=provider)
            except Exception as e:
                error = AppError.from_exception(e, f"Failed to embed note {note.id}")
                logger.warning(
                    "reindex_note_failed",
                    note_id=note.id,
                    category=error.category,
                    error=str(e),
                )
                summary.errors += 1
                summary.error_details.append(
                    ReindexErrorDTO(
                        note_id=note.id,
                        category=error.category,
                        message=error.message,
                    ),
                )
                continue

            if refresh.recomputed:
                summary.processed += 1
            else:
                summary.skipped += 1

        logger.info(
            "reindex_notes_done",
            processed=summary.processed,
            skipped=summary.skipped,
            errors=summary.errors,
        )
        return Success(summary)


class GetEmbeddingStatsUseCase:
    """Report how many records are stored per model, next to the active configuration."""

    def __init__(
        self,
        embedding_store: EmbeddingStore,
        provider_selector: EmbeddingProviderSelector,
    ) -> None:
        self.embedding_store = embedding_store
        self.provider_selector = provider_selector

    async def execute(self) -> Result[EmbeddingStatsResponse, AppError]:
        try:
            provider = self.provider_selector.current()
            model_info = await provider.get_model_info()
            counts = await self.embedding_store.count_by_model()

            dimensions = model_info.get("dimensions")
            return Success(
                EmbeddingStatsResponse(
                    records_by_model=counts,
                    total_records=sum(counts.values()),
                    current_provider=provider.provider_name,
                    current_model=provider.model_name,
                    current_dimensions=dimensions if isinstance(dimensions, int) else None,
                ),
            )
        except Exception as e:
            logger.exception("embedding_stats_failed", error=str(e))
            return Failure(AppError.from_exception(e, "Failed to collect embedding stats"))
