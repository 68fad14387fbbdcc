"""Search use cases: similar notes for a stored note, and free-text note search."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from returns.result import Failure, Result, Success

from application.dtos.embedding_dtos import SimilarNoteDTO, SimilarNotesResponse
from application.dtos.errors import AppError
from domain.services.similarity_ranker import SimilarityRanker

if TYPE_CHECKING:
    from application.dtos.embedding_dtos import SearchRequest
    from application.ports.embedding_provider import EmbeddingProviderSelector
    from application.ports.embedding_store import EmbeddingStore
    from application.services.note_embedder import NoteEmbedder
    from domain.value_objects.clinical_note import ClinicalNote
    from domain.value_objects.embedding_record import EmbeddingRecord

logger = structlog.get_logger()


def _to_dtos(ranked: list[tuple[EmbeddingRecord, float]]) -> list[SimilarNoteDTO]:
    return [
        SimilarNoteDTO(note_id=record.note_id, similarity_score=score)
        for record, score in ranked
    ]


class FindSimilarNotesUseCase:
    """Find the stored notes most similar to a given note.

    This use case:
    1. Brings the note's own embedding up to date (embedding it if absent or stale)
    2. Loads every other record stored under the same model
    3. Ranks them by cosine similarity and returns the top k note references

    Resolving note ids to display data is left to the caller.
    """

    def __init__(
        self,
        note_embedder: NoteEmbedder,
        embedding_store: EmbeddingStore,
        provider_selector: EmbeddingProviderSelector,
    ) -> None:
        self.note_embedder = note_embedder
        self.embedding_store = embedding_store
        self.provider_selector = provider_selector

    async def execute(
        self,
        note: ClinicalNote,
        k: int = 5,
        min_score: float | None = None,
    ) -> Result[SimilarNotesResponse, AppError]:
        """Rank stored notes by similarity to the given note.

        Args:
            note: The query note
            k: Maximum number of results
            min_score: Optional minimum similarity score

        Returns:
            Result containing SimilarNotesResponse on success or AppError on failure

        """
        try:
            logger.info("find_similar_notes_start", note_id=note.id, k=k)

            provider = self.provider_selector.current()
            refresh = await self.note_embedder.ensure_current(note, provider=provider)
            query = refresh.record

            candidates = [
                record
                for record in await self.embedding_store.all_for_model(query.model)
                if record.note_id != note.id
            ]
            ranked = SimilarityRanker.rank(query.vector, candidates, k, min_score)

            logger.info(
                "find_similar_notes_success",
                note_id=note.id,
                model=query.model,
                candidates=len(candidates),
                results_count=len(ranked),
                recomputed=refresh.recomputed,
            )

            results = _to_dtos(ranked)
            return Success(
                SimilarNotesResponse(
                    query=f"Note #{note.id}",
                    results=results,
                    total_results=len(results),
                    total_compared=len(candidates),
                    model_used=query.model,
                ),
            )

        except Exception as e:
            logger.error(
                "find_similar_notes_failed",
                note_id=note.id,
                error=str(e),
                exc_info=True,
            )
            return Failure(
                AppError.from_exception(e, f"Failed to find notes similar to note {note.id}"),
            )


class SearchNotesByTextUseCase:
    """Rank stored notes against a free-text query.

    The query vector is computed with the active provider and never stored.
    """

    def __init__(
        self,
        embedding_store: EmbeddingStore,
        provider_selector: EmbeddingProviderSelector,
    ) -> None:
        self.embedding_store = embedding_store
        self.provider_selector = provider_selector

    async def execute(self, request: SearchRequest) -> Result[SimilarNotesResponse, AppError]:
        if not request.query_text.strip():
            return Failure(AppError("validation", "Query text cannot be empty"))

        try:
            logger.info(
                "search_notes_start",
                query_length=len(request.query_text),
                limit=request.limit,
            )

            provider = self.provider_selector.current()
            query = await provider.embed(request.query_text)

            candidates = await self.embedding_store.all_for_model(query.model)
            ranked = SimilarityRanker.rank(
                query.vector,
                candidates,
                request.limit,
                request.score_threshold,
            )

            logger.info(
                "search_notes_success",
                model=query.model,
                candidates=len(candidates),
                results_count=len(ranked),
            )

            results = _to_dtos(ranked)
            return Success(
                SimilarNotesResponse(
                    query=request.query_text,
                    results=results,
                    total_results=len(results),
                    total_compared=len(candidates),
                    model_used=query.model,
                ),
            )

        except Exception as e:
            logger.exception(
                "search_notes_failed",
                query=request.query_text[:100],
                error=str(e),
            )
            return Failure(AppError.from_exception(e, "Failed to search notes"))
