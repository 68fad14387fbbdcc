from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

CONTENT_HASH_LENGTH = 16


class _EmbeddedVector(BaseModel):
    """A vector together with the model that produced it."""

    vector: list[float]
    """The embedding vector, one float32-representable value per dimension."""

    model: str
    """Name of the model that produced the vector."""

    dimensions: int
    """Dimensionality of the vector; always equal to len(vector)."""

    @field_validator("vector")
    @classmethod
    def validate_vector_not_empty(cls, v: list[float]) -> list[float]:
        """Ensure the vector is not empty."""
        if not v:
            msg = "Embedding vector cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("model")
    @classmethod
    def validate_model_name(cls, v: str) -> str:
        """Validate model name is not empty."""
        if not v or not v.strip():
            msg = "Model name cannot be empty"
            raise ValueError(msg)
        return v

    @field_validator("dimensions")
    @classmethod
    def validate_dimensions_match(cls, v: int, info) -> int:
        """Ensure dimensions match the actual vector length."""
        if "vector" in info.data:
            actual_dims = len(info.data["vector"])
            if v != actual_dims:
                msg = f"Declared dimensions ({v}) don't match vector length ({actual_dims})"
                raise ValueError(msg)
        return v


class EmbeddingResult(_EmbeddedVector):
    """A freshly computed embedding as returned by a provider."""


class EmbeddingRecord(_EmbeddedVector):
    """The current embedding of one note under one model.

    Exactly one record exists per (note_id, model); recomputing for the same
    model replaces it. The vector itself is persisted as little-endian float32
    bytes by the store, this object always carries the decoded form.
    """

    note_id: int
    """Identifier of the owning note (not owned by this record)."""

    content_hash: str
    """Fingerprint of the extracted text the vector was computed from."""

    computed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    """When the vector was computed."""

    @field_validator("content_hash")
    @classmethod
    def validate_content_hash(cls, v: str) -> str:
        """Content hashes are fixed-width lowercase hex."""
        if len(v) != CONTENT_HASH_LENGTH or any(c not in "0123456789abcdef" for c in v):
            msg = f"Content hash must be {CONTENT_HASH_LENGTH} lowercase hex characters"
            raise ValueError(msg)
        return v

    @classmethod
    def from_result(
        cls,
        note_id: int,
        result: EmbeddingResult,
        content_hash: str,
    ) -> "EmbeddingRecord":
        """Build the record that persists a provider result for a note."""
        return cls(
            note_id=note_id,
            vector=result.vector,
            model=result.model,
            dimensions=result.dimensions,
            content_hash=content_hash,
            computed_at=datetime.now(UTC),
        )

    def is_current_for(self, content_hash: str, model: str) -> bool:
        """Return True if this record was computed from the given text under the given model."""
        return self.content_hash == content_hash and self.model == model
