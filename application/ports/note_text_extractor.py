from typing import Protocol

from domain.value_objects.clinical_note import ClinicalNote


class NoteTextExtractor(Protocol):
    """Port for producing the searchable text of a note.

    Implementations must be total (always return a string, possibly empty)
    and must not call back into the retrieval use cases.
    """

    def extract_text(self, note: ClinicalNote) -> str: ...
