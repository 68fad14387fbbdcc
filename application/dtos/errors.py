from domain.exceptions import (
    CorruptDataError,
    DimensionMismatchError,
    DomainError,
    MissingCredentialError,
    ProviderInitFailedError,
    ProviderUnavailableError,
    ValidationError,
)

_CATEGORY_BY_EXCEPTION: tuple[tuple[type[DomainError], str], ...] = (
    (CorruptDataError, "corrupt_data"),
    (DimensionMismatchError, "dimension_mismatch"),
    (MissingCredentialError, "missing_credential"),
    (ProviderUnavailableError, "provider_unavailable"),
    (ProviderInitFailedError, "provider_init_failed"),
    (ValidationError, "validation"),
)


class AppError:
    """Represents different categories of application errors."""

    def __init__(self, category: str, message: str, cause: Exception | None = None) -> None:
        # 'corrupt_data', 'dimension_mismatch', 'missing_credential', 'provider_unavailable',
        # 'provider_init_failed', 'validation', 'internal_error'
        self.category = category
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message

    @classmethod
    def from_exception(cls, exc: Exception, context: str) -> "AppError":
        """Wrap an exception with context, keeping the original as the cause."""
        category = "internal_error"
        for exc_type, name in _CATEGORY_BY_EXCEPTION:
            if isinstance(exc, exc_type):
                category = name
                break
        return cls(category, f"{context}: {exc!s}", cause=exc)
