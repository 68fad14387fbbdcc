from pydantic import BaseModel, Field


class EmbeddingDTO(BaseModel):
    """Data transfer object for a note's current embedding."""

    note_id: int
    model_name: str
    dimensions: int
    vector: list[float]
    content_hash: str
    computed_at: str  # ISO format datetime
    recomputed: bool = Field(
        default=False,
        description="True if the vector was computed by this call, False if the stored one was current",
    )


class SimilarNoteDTO(BaseModel):
    """A note reference with its similarity to the query."""

    note_id: int
    similarity_score: float


class SearchRequest(BaseModel):
    """Request to search notes by free text."""

    query_text: str
    limit: int = Field(default=5, ge=0, le=100)
    score_threshold: float | None = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Minimum cosine similarity (-1.0 to 1.0)",
    )


class SimilarNotesResponse(BaseModel):
    """Response containing ranked note references."""

    query: str
    results: list[SimilarNoteDTO]
    total_results: int
    total_compared: int
    model_used: str


class ReindexErrorDTO(BaseModel):
    note_id: int
    category: str
    message: str


class ReindexSummary(BaseModel):
    """Outcome of a batch re-embedding run."""

    processed: int = 0
    skipped: int = 0
    errors: int = 0
    error_details: list[ReindexErrorDTO] = Field(default_factory=list)
    model_name: str
    provider: str
    total_notes_to_process: int = 0


class EmbeddingStatsResponse(BaseModel):
    """Stored embedding counts together with the active configuration."""

    records_by_model: dict[str, int]
    total_records: int
    current_provider: str
    current_model: str
    current_dimensions: int | None = Field(
        default=None,
        description="Output size of the active model, None if the provider cannot tell",
    )
