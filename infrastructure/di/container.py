from __future__ import annotations

from typing import TYPE_CHECKING

from lagom import Container
from motor.motor_asyncio import AsyncIOMotorClient

from application.ports.embedding_provider import EmbeddingProviderSelector
from application.ports.embedding_store import EmbeddingStore
from application.ports.note_text_extractor import NoteTextExtractor
from application.services.note_embedder import NoteEmbedder
from application.use_cases.embedding_use_cases import (
    EmbedNoteUseCase,
    GetEmbeddingStatsUseCase,
    ReindexNotesUseCase,
)
from application.use_cases.search_use_cases import (
    FindSimilarNotesUseCase,
    SearchNotesByTextUseCase,
)
from infrastructure.config import get_settings
from infrastructure.config import settings as default_settings
from infrastructure.embedding_stores.mongo_embedding_store import MongoEmbeddingStore
from infrastructure.embeddings.factory import SettingsEmbeddingProviderSelector
from infrastructure.text_extractors.clinical_note_extractor import ClinicalNoteTextExtractor

if TYPE_CHECKING:
    from infrastructure.config import Settings


def create_container(settings: Settings | None = None) -> Container:
    """Wire the retrieval use cases to their MongoDB and provider adapters.

    The note text extractor is the default clinical-note adapter; callers with
    their own note shapes can override ``container[NoteTextExtractor]``.

    The embedding store creates its unique (note_id, model) index before its
    first write; hosts may also await ``container[EmbeddingStore].ensure_indexes()``
    at startup to fail fast on an unreachable database.
    """
    settings = settings or default_settings
    container = Container()

    # MongoDB client shared by the embedding store
    mongo_client = AsyncIOMotorClient(settings.mongo_uri, tz_aware=True)
    container[AsyncIOMotorClient] = mongo_client

    container[EmbeddingStore] = MongoEmbeddingStore(client=mongo_client, settings=settings)

    # Provider selection is re-read from the environment per call
    container[EmbeddingProviderSelector] = SettingsEmbeddingProviderSelector(
        settings_loader=get_settings,
    )

    container[NoteTextExtractor] = lambda _: ClinicalNoteTextExtractor()

    container[NoteEmbedder] = lambda c: NoteEmbedder(
        provider_selector=c[EmbeddingProviderSelector],
        embedding_store=c[EmbeddingStore],
        text_extractor=c[NoteTextExtractor],
    )

    # Embedding Use Cases
    container[EmbedNoteUseCase] = lambda c: EmbedNoteUseCase(
        note_embedder=c[NoteEmbedder],
    )
    container[ReindexNotesUseCase] = lambda c: ReindexNotesUseCase(
        note_embedder=c[NoteEmbedder],
        provider_selector=c[EmbeddingProviderSelector],
    )
    container[GetEmbeddingStatsUseCase] = lambda c: GetEmbeddingStatsUseCase(
        embedding_store=c[EmbeddingStore],
        provider_selector=c[EmbeddingProviderSelector],
    )

    # Search Use Cases
    container[FindSimilarNotesUseCase] = lambda c: FindSimilarNotesUseCase(
        note_embedder=c[NoteEmbedder],
        embedding_store=c[EmbeddingStore],
        provider_selector=c[EmbeddingProviderSelector],
    )
    container[SearchNotesByTextUseCase] = lambda c: SearchNotesByTextUseCase(
        embedding_store=c[EmbeddingStore],
        provider_selector=c[EmbeddingProviderSelector],
    )

    return container
