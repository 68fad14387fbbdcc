"""Binary layout of embedding vectors in storage.

Vectors are persisted as little-endian IEEE-754 float32 values, four bytes per
element, in original order. This is the only bit-exact storage contract; the
rest of the system only ever sees decoded lists of floats.

Rows written before the binary layout carried the vector as a JSON array.
``parse_stored_vector`` turns whatever the store hands back into a tagged
variant so the normalization happens once, at the store boundary.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import numpy as np

from domain.exceptions import CorruptDataError, DimensionMismatchError

if TYPE_CHECKING:
    from collections.abc import Sequence

FLOAT32_LE = np.dtype("<f4")
BYTES_PER_ELEMENT = FLOAT32_LE.itemsize


def encode_vector(vector: Sequence[float]) -> bytes:
    """Serialize a vector to exactly 4 * len(vector) bytes."""
    return np.asarray(vector, dtype=FLOAT32_LE).tobytes()


def decode_vector(data: bytes, expected_dimensions: int | None = None) -> list[float]:
    """Deserialize bytes produced by encode_vector.

    Values are not validated: NaN and infinities pass through bit-for-bit.

    Args:
        data: The stored bytes
        expected_dimensions: Optional assertion on the decoded length

    Raises:
        CorruptDataError: If the byte length is not a multiple of 4
        DimensionMismatchError: If the decoded length differs from expected_dimensions

    """
    if len(data) % BYTES_PER_ELEMENT != 0:
        msg = f"Vector byte length {len(data)} is not a multiple of {BYTES_PER_ELEMENT}"
        raise CorruptDataError(msg)

    vector = np.frombuffer(data, dtype=FLOAT32_LE).tolist()

    if expected_dimensions is not None and len(vector) != expected_dimensions:
        msg = f"Decoded {len(vector)} dimensions, expected {expected_dimensions}"
        raise DimensionMismatchError(msg)

    return vector


@dataclass(frozen=True)
class BinaryVector:
    """A vector stored in the float32 binary layout."""

    data: bytes

    def to_vector(self) -> list[float]:
        return decode_vector(self.data)


@dataclass(frozen=True)
class LegacyJsonVector:
    """A vector stored as a JSON array by older versions."""

    values: list[Any]

    def to_vector(self) -> list[float]:
        try:
            floats = [float(v) for v in self.values]
        except (TypeError, ValueError) as e:
            msg = f"Legacy JSON vector holds a non-numeric element: {e!s}"
            raise CorruptDataError(msg) from e
        # Round through float32 so legacy rows compare exactly like binary ones
        return np.asarray(floats, dtype=FLOAT32_LE).tolist()


StoredVector = BinaryVector | LegacyJsonVector


def parse_stored_vector(raw: object) -> StoredVector:
    """Classify a persisted vector value.

    Raises:
        CorruptDataError: If the value is neither binary nor a JSON array

    """
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return BinaryVector(bytes(raw))

    if isinstance(raw, str):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError as e:
            msg = f"Legacy vector is not valid JSON: {e.msg}"
            raise CorruptDataError(msg) from e
        if not isinstance(values, list):
            msg = "Legacy JSON vector is not an array"
            raise CorruptDataError(msg)
        return LegacyJsonVector(values)

    if isinstance(raw, list):
        return LegacyJsonVector(raw)

    msg = f"Unsupported stored vector type: {type(raw).__name__}"
    raise CorruptDataError(msg)
