"""Strict BCS reading on top of the Aptos SDK deserializer.

The SDK accepts any ULEB128 spelling of a value. Payment envelopes are signed
bytes, so every length and variant tag must use its single canonical form and
a buffer must be consumed exactly.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from aptos_sdk.bcs import Deserializer, Serializer
from aptos_sdk.errors import AptosSDKError

from ..domain.errors import DecodeError

T = TypeVar("T")

MAX_U32 = 2**32 - 1
# A u32 needs at most five 7-bit groups.
MAX_ULEB128_BYTES = 5


class StrictDeserializer(Deserializer):
    """``Deserializer`` that rejects non-canonical ULEB128 and trailing bytes."""

    def __init__(self, data: bytes) -> None:
        super().__init__(data)
        self._data = bytes(data)

    @property
    def position(self) -> int:
        return len(self._data) - self.remaining()

    def slice(self, start: int, end: int) -> bytes:
        return self._data[start:end]

    def uleb128(self) -> int:
        value = 0
        for index in range(MAX_ULEB128_BYTES):
            byte = self.u8()
            value |= (byte & 0x7F) << (7 * index)
            if byte & 0x80 == 0:
                if byte == 0 and index > 0:
                    raise DecodeError("Non-canonical ULEB128 encoding")
                if value > MAX_U32:
                    raise DecodeError("ULEB128 value overflows u32")
                return value
        raise DecodeError("ULEB128 value overflows u32")

    def option(self, decoder: Callable[[Deserializer], T]) -> Optional[T]:
        if self.bool():
            return decoder(self)
        return None

    def finish(self) -> None:
        """Assert the whole buffer was consumed."""
        if self.remaining() != 0:
            raise DecodeError(
                f"Unexpected {self.remaining()} trailing bytes at offset {self.position}"
            )


def to_bytes(value) -> bytes:
    """BCS encoding of any SDK serializable."""
    serializer = Serializer()
    value.serialize(serializer)
    return serializer.output()


@contextmanager
def decoding(what: str) -> Iterator[None]:
    """Report any failure of the SDK decoders inside the block as ``DecodeError``."""
    try:
        yield
    except DecodeError:
        raise
    except (AptosSDKError, NotImplementedError, ValueError, IndexError) as e:
        raise DecodeError(f"Invalid {what}: {e}") from e
