from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

from application.ports.note_text_extractor import NoteTextExtractor
from domain.value_objects.clinical_note import NoteType

if TYPE_CHECKING:
    from domain.value_objects.clinical_note import ClinicalNote

logger = structlog.get_logger()

_NARRATIVE_TYPES = {NoteType.PROGRESS.value, NoteType.DISCHARGE.value, NoteType.HP.value}


def _format_items(items: Any, template: str, *fields: str) -> str | None:
    if not isinstance(items, list) or not items:
        return None
    lines = []
    for item in items:
        if not isinstance(item, dict):
            continue
        lines.append(template.format(*(item.get(f, "") for f in fields)))
    return "\n".join(lines) if lines else None


class ClinicalNoteTextExtractor(NoteTextExtractor):
    """Produce searchable text from a note's generated output.

    Narrative notes (progress, discharge, H&P) contribute their content field.
    Analysis notes contribute their differential, workup and consult sections,
    which is what makes two cases clinically alike. Anything else falls back
    to the serialized output so no note is ever unsearchable.
    """

    def extract_text(self, note: ClinicalNote) -> str:
        try:
            output = json.loads(note.output_json)
        except json.JSONDecodeError:
            logger.warning("note_output_not_json", note_id=note.id, note_type=note.note_type)
            return note.output_json

        if not isinstance(output, dict):
            return json.dumps(output, separators=(",", ":"))

        if note.note_type in _NARRATIVE_TYPES:
            content = output.get("content")
            return content if isinstance(content, str) else ""

        if note.note_type == NoteType.ANALYSIS.value:
            sections = [
                _format_items(
                    output.get("differentialDiagnosis"),
                    "{}: {}",
                    "diagnosis",
                    "reasoning",
                ),
                _format_items(
                    output.get("recommendedWorkup"),
                    "{}: {}",
                    "test",
                    "rationale",
                ),
                _format_items(
                    output.get("suggestedConsults"),
                    "Consult {}: {}",
                    "specialty",
                    "reason",
                ),
            ]
            text = "\n\n".join(s for s in sections if s)
            return text or json.dumps(output, separators=(",", ":"))

        return json.dumps(output, separators=(",", ":"))
