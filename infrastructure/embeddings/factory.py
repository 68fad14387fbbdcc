from __future__ import annotations

from threading import Lock
from typing import TYPE_CHECKING

import structlog

from infrastructure.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Callable

    from application.ports.embedding_provider import EmbeddingProvider
    from infrastructure.config import Settings

log = structlog.get_logger(__name__)


def create_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Instantiate the embedding adapter selected by EMBEDDING_PROVIDER in config."""
    provider = settings.embedding_provider

    if provider == "local":
        from infrastructure.embeddings.sentence_transformer_provider import (  # noqa: PLC0415
            SentenceTransformerEmbeddingProvider,
        )

        log.info(
            "embedding.factory",
            provider="local",
            model=settings.local_embedding_model_name,
            device=settings.embedding_device,
        )
        return SentenceTransformerEmbeddingProvider(
            model_name=settings.local_embedding_model_name,
            device=settings.embedding_device,
        )

    if provider == "remote":
        from infrastructure.embeddings.openai_provider import (  # noqa: PLC0415
            OpenAIEmbeddingProvider,
        )

        log.info("embedding.factory", provider="remote", model=settings.remote_embedding_model_name)
        return OpenAIEmbeddingProvider(
            model_name=settings.remote_embedding_model_name,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    msg = f"Unsupported EMBEDDING_PROVIDER: {provider!r}. Valid options: local, remote"
    raise ValueError(msg)


def _provider_key(settings: Settings) -> tuple[str, ...]:
    if settings.embedding_provider == "local":
        return ("local", settings.local_embedding_model_name, settings.embedding_device)
    return (
        settings.embedding_provider,
        settings.remote_embedding_model_name,
        settings.openai_api_key or "",
        settings.openai_base_url or "",
    )


class SettingsEmbeddingProviderSelector:
    """EmbeddingProviderSelector that re-reads configuration on every call.

    Provider instances are cached per configuration, so switching back and
    forth does not rebuild clients; previously stored records of the other
    provider are left untouched.
    """

    def __init__(self, settings_loader: Callable[[], Settings] = get_settings) -> None:
        self._settings_loader = settings_loader
        self._providers: dict[tuple[str, ...], EmbeddingProvider] = {}
        self._lock = Lock()

    def current(self) -> EmbeddingProvider:
        settings = self._settings_loader()
        key = _provider_key(settings)
        with self._lock:
            provider = self._providers.get(key)
            if provider is None:
                provider = create_embedding_provider(settings)
                self._providers[key] = provider
        return provider
