"""Shared test fixtures and configuration."""

from __future__ import annotations

import json

import pytest

from application.services.note_embedder import NoteEmbedder
from domain.value_objects.clinical_note import ClinicalNote
from tests.mocks import (
    InMemoryEmbeddingStore,
    MockEmbeddingProvider,
    MockProviderSelector,
    MockTextExtractor,
    keyword_vector_fn,
)

KEYWORDS = ["chest", "troponin", "lipase"]


@pytest.fixture
def keyword_provider() -> MockEmbeddingProvider:
    """Provider whose vector marks which of KEYWORDS occur in the text."""
    return MockEmbeddingProvider(
        model_name="keyword-model",
        dims=len(KEYWORDS),
        vector_fn=keyword_vector_fn(KEYWORDS),
    )


@pytest.fixture
def provider_selector(keyword_provider: MockEmbeddingProvider) -> MockProviderSelector:
    return MockProviderSelector(keyword_provider)


@pytest.fixture
def embedding_store() -> InMemoryEmbeddingStore:
    return InMemoryEmbeddingStore()


@pytest.fixture
def text_extractor() -> MockTextExtractor:
    """Extractor serving three short clinical presentations."""
    return MockTextExtractor(
        {
            1: "chest pain, elevated troponin",
            2: "abdominal pain, elevated lipase",
            3: "chest pain, normal troponin, anxiety",
        },
    )


@pytest.fixture
def note_embedder(
    provider_selector: MockProviderSelector,
    embedding_store: InMemoryEmbeddingStore,
    text_extractor: MockTextExtractor,
) -> NoteEmbedder:
    return NoteEmbedder(
        provider_selector=provider_selector,
        embedding_store=embedding_store,
        text_extractor=text_extractor,
    )


@pytest.fixture
def sample_notes() -> list[ClinicalNote]:
    """Three notes with ids matching the text_extractor fixture."""
    return [ClinicalNote(id=i, note_type="progress") for i in (1, 2, 3)]


@pytest.fixture
def sample_analysis_note() -> ClinicalNote:
    """Create an analysis note with all three structured sections."""
    output = {
        "differentialDiagnosis": [
            {"diagnosis": "Acute coronary syndrome", "reasoning": "Chest pain with troponin rise"},
            {"diagnosis": "Pericarditis", "reasoning": "Pleuritic component"},
        ],
        "recommendedWorkup": [
            {"test": "Serial ECG", "rationale": "Track ST changes"},
        ],
        "suggestedConsults": [
            {"specialty": "Cardiology", "reason": "Possible catheterization"},
        ],
    }
    return ClinicalNote(id=42, note_type="analysis", output_json=json.dumps(output))
