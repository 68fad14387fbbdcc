from __future__ import annotations

import asyncio
from threading import Lock
from typing import TYPE_CHECKING, Literal

import structlog

from application.ports.embedding_provider import EmbeddingProvider, truncate_for_embedding
from domain.exceptions import ProviderInitFailedError
from domain.value_objects.embedding_record import EmbeddingResult

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer

logger = structlog.get_logger()

# Process-wide registry of loaded models. Once a model is in here it is only
# ever read, so concurrent encoders share it without locking; the lock guards
# the one-time load.
_models: dict[tuple[str, str], SentenceTransformer] = {}
_models_lock = Lock()


def _resolve_device(device: str) -> str:
    """Resolve and validate the device."""
    if device == "cpu":
        return device

    import torch  # only needed for accelerators

    if device == "cuda" and not torch.cuda.is_available():
        logger.warning("cuda_not_available_falling_back_to_cpu")
        return "cpu"
    if device == "mps" and not torch.backends.mps.is_available():
        logger.warning("mps_not_available_falling_back_to_cpu")
        return "cpu"
    return device


def _load_shared_model(model_name: str, device: str) -> SentenceTransformer:
    """Return the shared model instance, loading it on first use.

    A failed load is not remembered; the next call tries again.

    Raises:
        ProviderInitFailedError: If the model cannot be loaded

    """
    key = (model_name, device)
    model = _models.get(key)
    if model is not None:
        return model

    with _models_lock:
        model = _models.get(key)
        if model is not None:
            return model

        try:
            from sentence_transformers import SentenceTransformer  # deferred until first use

            resolved_device = _resolve_device(device)
            logger.info(
                "loading_sentence_transformer_model",
                model_name=model_name,
                device=resolved_device,
            )
            model = SentenceTransformer(model_name, device=resolved_device)
        except Exception as e:
            logger.error(
                "sentence_transformer_load_failed",
                model_name=model_name,
                device=device,
                error=str(e),
            )
            msg = f"Failed to load local embedding model {model_name!r}: {e!s}"
            raise ProviderInitFailedError(msg) from e

        _models[key] = model
        logger.info(
            "model_loaded",
            model_name=model_name,
            dimensions=model.get_sentence_embedding_dimension(),
        )
        return model


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """Adapter generating embeddings in process with sentence-transformers.

    Token representations are mean-pooled by the model's pooling layer and the
    result is normalized to unit length. Supports models like:
    - sentence-transformers/all-MiniLM-L6-v2 (384 dimensions, fast)
    - sentence-transformers/all-mpnet-base-v2 (768 dimensions, better quality)
    """

    provider_name = "local"

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        device: Literal["cpu", "cuda", "mps"] = "cpu",
    ) -> None:
        self._model_name = model_name
        self.device = device

    @property
    def model_name(self) -> str:
        return self._model_name

    def _encode(self, text: str) -> list[float]:
        model = _load_shared_model(self._model_name, self.device)
        return model.encode(
            text,
            convert_to_tensor=False,
            normalize_embeddings=True,
        ).tolist()

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed text locally; inference runs in a worker thread."""
        truncated = truncate_for_embedding(text)

        logger.debug(
            "generating_embedding",
            text_length=len(text),
            truncated=len(truncated) < len(text),
        )

        vector = await asyncio.to_thread(self._encode, truncated)

        return EmbeddingResult(
            vector=vector,
            model=self._model_name,
            dimensions=len(vector),
        )

    async def get_model_info(self) -> dict[str, str | int]:
        """Get information about the current embedding model."""
        model = await asyncio.to_thread(_load_shared_model, self._model_name, self.device)

        return {
            "model_name": self._model_name,
            "dimensions": model.get_sentence_embedding_dimension(),
            "provider": self.provider_name,
            "device": self.device,
        }
