"""Mock implementations for testing."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

from domain.exceptions import CorruptDataError
from domain.value_objects.clinical_note import ClinicalNote
from domain.value_objects.embedding_record import EmbeddingRecord, EmbeddingResult


# ---------------------------------------------------------------------------
# Embedding provider mocks
# ---------------------------------------------------------------------------


class MockEmbeddingProvider:
    """Call-counting EmbeddingProvider.

    By default every text maps to the same constant vector; pass vector_fn to
    make vectors depend on the text.
    """

    def __init__(
        self,
        model_name: str = "test-model",
        dims: int = 4,
        vector_fn: Callable[[str], list[float]] | None = None,
        raise_on_call: Exception | None = None,
        provider_name: str = "mock",
        delay: float = 0.0,
    ) -> None:
        self._model_name = model_name
        self.dims = dims
        self.vector_fn = vector_fn
        self.raise_on_call = raise_on_call
        self.provider_name = provider_name
        self.delay = delay
        self.embed_calls: list[str] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    async def embed(self, text: str) -> EmbeddingResult:
        if self.raise_on_call:
            raise self.raise_on_call
        self.embed_calls.append(text)
        if self.delay:
            await asyncio.sleep(self.delay)
        vector = self.vector_fn(text) if self.vector_fn else [0.5] * self.dims
        return EmbeddingResult(vector=vector, model=self._model_name, dimensions=len(vector))

    async def get_model_info(self) -> dict[str, str | int]:
        return {
            "model_name": self._model_name,
            "dimensions": self.dims,
            "provider": self.provider_name,
        }


def keyword_vector_fn(keywords: list[str]) -> Callable[[str], list[float]]:
    """Vector with 1.0 at position i when keywords[i] occurs in the text."""

    def _vector(text: str) -> list[float]:
        lowered = text.lower()
        return [1.0 if keyword in lowered else 0.0 for keyword in keywords]

    return _vector


class MockProviderSelector:
    """EmbeddingProviderSelector returning whichever provider is set on it."""

    def __init__(self, provider: MockEmbeddingProvider) -> None:
        self.provider = provider
        self.current_calls = 0

    def current(self) -> MockEmbeddingProvider:
        self.current_calls += 1
        return self.provider


# ---------------------------------------------------------------------------
# Embedding store mocks
# ---------------------------------------------------------------------------


class InMemoryEmbeddingStore:
    """Dict-backed EmbeddingStore keyed by (note_id, model)."""

    def __init__(self) -> None:
        self.records: dict[tuple[int, str], EmbeddingRecord] = {}
        self.put_calls: list[EmbeddingRecord] = []
        self.corrupt_keys: set[tuple[int, str]] = set()

    async def ensure_indexes(self) -> None:
        pass

    async def get(self, note_id: int, model: str) -> EmbeddingRecord | None:
        if (note_id, model) in self.corrupt_keys:
            msg = f"Stored embedding for note {note_id} is corrupt"
            raise CorruptDataError(msg)
        return self.records.get((note_id, model))

    async def put(self, record: EmbeddingRecord) -> None:
        self.put_calls.append(record)
        self.corrupt_keys.discard((record.note_id, record.model))
        self.records[(record.note_id, record.model)] = record

    async def all_for_model(self, model: str) -> list[EmbeddingRecord]:
        return sorted(
            (r for (_, m), r in self.records.items() if m == model),
            key=lambda r: r.note_id,
        )

    async def count_by_model(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for _, model in self.records:
            counts[model] = counts.get(model, 0) + 1
        return counts


# ---------------------------------------------------------------------------
# Text extractor mock
# ---------------------------------------------------------------------------


class MockTextExtractor:
    """NoteTextExtractor serving text from a mutable note_id -> text mapping."""

    def __init__(self, texts: dict[int, str] | None = None) -> None:
        self.texts = texts or {}

    def extract_text(self, note: ClinicalNote) -> str:
        return self.texts.get(note.id, "")


def make_note(note_id: int, note_type: str = "progress", output_json: str = "{}") -> ClinicalNote:
    return ClinicalNote(id=note_id, note_type=note_type, output_json=output_json)


def make_record(
    note_id: int,
    vector: list[float],
    model: str = "test-model",
    content_hash: str = "0123456789abcdef",
) -> EmbeddingRecord:
    return EmbeddingRecord(
        note_id=note_id,
        vector=vector,
        model=model,
        dimensions=len(vector),
        content_hash=content_hash,
    )


# ---------------------------------------------------------------------------
# Motor collection fake
# ---------------------------------------------------------------------------


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeAsyncCursor:
    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> FakeAsyncCursor:
        self._docs = sorted(self._docs, key=lambda d: d[key], reverse=direction < 0)
        return self

    def __aiter__(self) -> FakeAsyncCursor:
        self._iter = iter(self._docs)
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeMotorCollection:
    """In-memory stand-in for the subset of AsyncIOMotorCollection the store uses."""

    def __init__(self) -> None:
        self.docs: list[dict[str, Any]] = []
        self.indexes: list[tuple[Any, dict[str, Any]]] = []

    async def create_index(self, keys: Any, **kwargs: Any) -> str:
        self.indexes.append((keys, kwargs))
        return "index"

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        for doc in self.docs:
            if _matches(doc, query):
                return dict(doc)
        return None

    async def update_one(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        upsert: bool = False,
    ) -> None:
        for doc in self.docs:
            if _matches(doc, query):
                doc.update(update["$set"])
                return
        if upsert:
            self.docs.append({**query, **update["$set"]})

    def find(self, query: dict[str, Any]) -> FakeAsyncCursor:
        return FakeAsyncCursor([dict(d) for d in self.docs if _matches(d, query)])

    def aggregate(self, pipeline: list[dict[str, Any]]) -> FakeAsyncCursor:
        group = pipeline[0]["$group"]
        field = group["_id"].lstrip("$")
        counts: dict[Any, int] = {}
        for doc in self.docs:
            counts[doc.get(field)] = counts.get(doc.get(field), 0) + 1
        return FakeAsyncCursor([{"_id": key, "count": count} for key, count in counts.items()])


class FakeMotorClient:
    """Client whose databases and collections are created on first access."""

    def __init__(self) -> None:
        self.collections: dict[tuple[str, str], FakeMotorCollection] = {}

    def __getitem__(self, db_name: str) -> _FakeDatabase:
        return _FakeDatabase(self, db_name)


class _FakeDatabase:
    def __init__(self, client: FakeMotorClient, name: str) -> None:
        self._client = client
        self._name = name

    def __getitem__(self, collection_name: str) -> FakeMotorCollection:
        key = (self._name, collection_name)
        if key not in self._client.collections:
            self._client.collections[key] = FakeMotorCollection()
        return self._client.collections[key]
