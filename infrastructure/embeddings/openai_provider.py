from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import openai
import structlog

from application.ports.embedding_provider import EmbeddingProvider, truncate_for_embedding
from domain.exceptions import CorruptDataError, MissingCredentialError, ProviderUnavailableError
from domain.value_objects.embedding_record import EmbeddingResult

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = structlog.get_logger()

# Output size of the hosted models; the provider reports these, callers never assume them.
OPENAI_EMBEDDING_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Adapter generating embeddings with the hosted OpenAI embeddings API.

    Requires OPENAI_API_KEY. Constructing the provider never fails; a missing
    key surfaces as MissingCredentialError when embedding is attempted.

    The SDK client is built with max_retries=0: retrying, with or without
    backoff, is up to the caller. Timeouts and cancellation also belong to the
    caller and propagate through the awaited request.
    """

    provider_name = "remote"

    def __init__(
        self,
        model_name: str = "text-embedding-3-small",
        api_key: str | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self._model_name = model_name
        self._api_key = api_key
        self._base_url = base_url
        self._client = client

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimensions(self) -> int | None:
        """Known output size of the configured model, or None for an unlisted model."""
        return OPENAI_EMBEDDING_DIMENSIONS.get(self._model_name)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                msg = "OPENAI_API_KEY is required when EMBEDDING_PROVIDER=remote"
                raise MissingCredentialError(msg)
            self._client = openai.AsyncOpenAI(
                api_key=self._api_key,
                base_url=self._base_url,
                max_retries=0,
            )
        return self._client

    async def embed(self, text: str) -> EmbeddingResult:
        """Embed text with one request to the embeddings endpoint.

        Raises:
            MissingCredentialError: If no API key is configured
            ProviderUnavailableError: On network, timeout or HTTP errors
            CorruptDataError: If the response vector has the wrong size

        """
        client = self._get_client()
        truncated = truncate_for_embedding(text)

        logger.debug(
            "openai.embed",
            model=self._model_name,
            text_length=len(text),
            truncated=len(truncated) < len(text),
        )

        try:
            response = await client.embeddings.create(
                model=self._model_name,
                input=truncated,
            )
        except openai.APIError as e:
            logger.warning("openai.embed_failed", model=self._model_name, error=str(e))
            msg = f"OpenAI embeddings request failed: {e!s}"
            raise ProviderUnavailableError(msg) from e

        # Stored vectors are float32; keep the in-memory copy identical to the stored one
        vector = np.asarray(response.data[0].embedding, dtype=np.float32).tolist()

        expected = self.dimensions
        if expected is not None and len(vector) != expected:
            msg = f"OpenAI returned {len(vector)} dimensions for {self._model_name}, expected {expected}"
            raise CorruptDataError(msg)

        return EmbeddingResult(
            vector=vector,
            model=self._model_name,
            dimensions=len(vector),
        )

    async def get_model_info(self) -> dict[str, str | int]:
        info: dict[str, str | int] = {
            "provider": self.provider_name,
            "model_name": self._model_name,
        }
        if self.dimensions is not None:
            info["dimensions"] = self.dimensions
        return info
