"""Domain exceptions for embedding and retrieval rule violations."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ValidationError(DomainError):
    """Raised when input validation fails."""


class CorruptDataError(DomainError):
    """Raised when a stored vector cannot be decoded or disagrees with its metadata.

    The offending record is treated as requiring recomputation.
    """


class DimensionMismatchError(DomainError):
    """Raised when vectors of different dimensionality are compared directly."""


class EmbeddingProviderError(DomainError):
    """Base exception for embedding provider failures."""


class MissingCredentialError(EmbeddingProviderError):
    """Raised when the remote provider is selected but no API key is configured."""


class ProviderUnavailableError(EmbeddingProviderError):
    """Raised when the remote embedding API cannot be reached or answers with an error.

    Retry policy belongs to the caller; the provider never retries on its own.
    """


class ProviderInitFailedError(EmbeddingProviderError):
    """Raised when the local embedding model fails to load.

    The failure is not cached: the next call attempts the load again.
    """
