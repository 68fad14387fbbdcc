"""Content fingerprinting used to detect stale embeddings."""

from __future__ import annotations

import hashlib

from domain.value_objects.embedding_record import CONTENT_HASH_LENGTH


def fingerprint(text: str) -> str:
    """Return a short, deterministic fingerprint of the given text.

    SHA-256 over the UTF-8 bytes, truncated to the first 16 hex characters.
    No normalization is applied: any byte change, including whitespace,
    yields a different fingerprint and therefore a recomputation.

    The fingerprint is only used for change detection, never for identity,
    so the truncated width is acceptable.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:CONTENT_HASH_LENGTH]
