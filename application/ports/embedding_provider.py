from typing import Protocol

from domain.value_objects.embedding_record import EmbeddingResult

MAX_EMBEDDING_INPUT_CHARS = 8000
"""Inputs are prefix-truncated to this many characters before embedding."""


def truncate_for_embedding(text: str) -> str:
    """Silently cut text down to the maximum input length providers accept."""
    return text[:MAX_EMBEDDING_INPUT_CHARS]


class EmbeddingProvider(Protocol):
    """Port for turning text into a fixed-length embedding vector.

    This is a protocol (interface) that defines what the application layer
    expects from an embedding provider, without coupling to any specific
    implementation (sentence-transformers, OpenAI, etc.).

    A provider reports its own model name and dimensionality; nothing else
    in the system assumes a size for a given provider.
    """

    @property
    def provider_name(self) -> str:
        """Short name of the provider variant ("local", "remote")."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the model whose vectors this provider produces.

        Known without loading the model, so stored records can be looked up
        before anything is computed.
        """
        ...

    async def embed(self, text: str) -> EmbeddingResult:
        """Generate an embedding vector for the given text.

        Text longer than MAX_EMBEDDING_INPUT_CHARS is truncated, not rejected.

        Returns:
            EmbeddingResult: The vector together with model name and dimensions

        Raises:
            MissingCredentialError: If the provider needs a credential that is not configured
            ProviderUnavailableError: If the remote API cannot be reached
            ProviderInitFailedError: If the local model fails to load

        """
        ...

    async def get_model_info(self) -> dict[str, str | int]:
        """Get information about the current embedding model.

        Returns:
            Dictionary with model_name, dimensions, and provider info

        """
        ...


class EmbeddingProviderSelector(Protocol):
    """Port resolving the provider selected by the current configuration.

    Called once per orchestration call, so a configuration change applies to
    the next call without restarting the process.
    """

    def current(self) -> EmbeddingProvider: ...
