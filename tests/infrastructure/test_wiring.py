"""Tests for the DI container and logging setup."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import structlog

from application.ports.embedding_provider import EmbeddingProviderSelector
from application.ports.embedding_store import EmbeddingStore
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
from infrastructure.config import Settings
from infrastructure.di.container import create_container
from infrastructure.embedding_stores.mongo_embedding_store import MongoEmbeddingStore
from infrastructure.embeddings.factory import SettingsEmbeddingProviderSelector
from infrastructure.logging import setup_logging

if TYPE_CHECKING:
    from pathlib import Path


class TestContainer:
    """Test that every use case resolves from the container."""

    def test_resolves_adapters(self) -> None:
        container = create_container(Settings.model_construct())

        assert isinstance(container[EmbeddingStore], MongoEmbeddingStore)
        assert isinstance(container[EmbeddingProviderSelector], SettingsEmbeddingProviderSelector)
        assert isinstance(container[NoteEmbedder], NoteEmbedder)

    def test_resolves_use_cases(self) -> None:
        container = create_container(Settings.model_construct())

        for use_case in (
            EmbedNoteUseCase,
            ReindexNotesUseCase,
            GetEmbeddingStatsUseCase,
            FindSimilarNotesUseCase,
            SearchNotesByTextUseCase,
        ):
            assert isinstance(container[use_case], use_case)

    def test_store_uses_configured_collection(self) -> None:
        settings = Settings.model_construct(
            mongo_db="retrieval_test",
            mongo_embeddings_collection="vectors",
        )

        store = create_container(settings)[EmbeddingStore]

        assert store.embeddings.name == "vectors"
        assert store.db.name == "retrieval_test"


class TestSetupLogging:
    def test_writes_log_file(self, tmp_path: Path) -> None:
        root_logger = logging.getLogger()
        handlers_before = list(root_logger.handlers)
        level_before = root_logger.level
        settings = Settings.model_construct(log_dir=tmp_path, app_env="production")

        try:
            setup_logging(settings)
            logging.getLogger("retrieval.test").warning("stdlib_record")
            for handler in root_logger.handlers:
                handler.flush()

            assert (tmp_path / "production.log").read_text().count("stdlib_record") == 1
        finally:
            for handler in root_logger.handlers:
                if handler not in handlers_before:
                    handler.close()
            root_logger.handlers = handlers_before
            root_logger.setLevel(level_before)
            structlog.contextvars.clear_contextvars()
            structlog.reset_defaults()
