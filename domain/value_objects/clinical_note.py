from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class NoteType(str, Enum):
    """Enumerate the note types the text extractor knows how to read."""

    PROGRESS = "progress"
    DISCHARGE = "discharge"
    HP = "hp"
    ANALYSIS = "analysis"


class ClinicalNote(BaseModel):
    """A stored clinical note as handed over by the note repository.

    Persistence and authoring of notes live outside this package; retrieval
    only needs the identifier and the generated output to extract text from.
    """

    id: int
    """Identifier of the note in the owning application."""

    note_type: str
    """One of NoteType's values; unknown types are tolerated."""

    output_json: str = Field(default="{}")
    """Generated note output, serialized as JSON."""

    patient_initials: str | None = None

    created_at: datetime | None = None
