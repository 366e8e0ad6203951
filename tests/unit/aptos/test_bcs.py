"""Unit tests for the strict BCS reader."""

import pytest
from aptos_sdk.errors import DeserializationError

from x402_aptos.aptos.bcs import StrictDeserializer, decoding
from x402_aptos.domain.errors import DecodeError


class TestStrictDeserializer:
    """Test StrictDeserializer against hand-written byte strings."""

    def test_u64_is_little_endian(self) -> None:
        d = StrictDeserializer(bytes.fromhex("8813000000000000"))
        assert d.u64() == 5000
        d.finish()

    def test_uleb128_multi_byte(self) -> None:
        d = StrictDeserializer(bytes([0x80, 0x01, 0xFF, 0x7F]))
        assert d.uleb128() == 128
        assert d.uleb128() == 16383

    def test_uleb128_zero_is_single_byte(self) -> None:
        assert StrictDeserializer(b"\x00").uleb128() == 0

    def test_uleb128_rejects_padded_zero(self) -> None:
        with pytest.raises(DecodeError, match="Non-canonical"):
            StrictDeserializer(b"\x80\x00").uleb128()

    def test_uleb128_rejects_padded_small_value(self) -> None:
        # 2 spelled with a redundant continuation group
        with pytest.raises(DecodeError, match="Non-canonical"):
            StrictDeserializer(b"\x82\x00").uleb128()

    def test_uleb128_max_u32(self) -> None:
        d = StrictDeserializer(bytes([0xFF, 0xFF, 0xFF, 0xFF, 0x0F]))
        assert d.uleb128() == 2**32 - 1

    def test_uleb128_overflow_raises(self) -> None:
        with pytest.raises(DecodeError, match="overflows"):
            StrictDeserializer(bytes([0xFF, 0xFF, 0xFF, 0xFF, 0x1F])).uleb128()

    def test_uleb128_too_many_groups_raises(self) -> None:
        with pytest.raises(DecodeError, match="overflows"):
            StrictDeserializer(bytes([0xFF] * 6)).uleb128()

    def test_sequence_length_uses_canonical_check(self) -> None:
        with pytest.raises(DecodeError, match="Non-canonical"):
            StrictDeserializer(b"\x81\x00\x07").sequence(lambda d: d.u8())

    def test_str_reads_length_prefix(self) -> None:
        d = StrictDeserializer(b"\x08transfer")
        assert d.str() == "transfer"

    def test_truncated_read_raises_sdk_error(self) -> None:
        d = StrictDeserializer(b"\x01\x02\x03")
        with pytest.raises(DeserializationError):
            d.u64()

    def test_finish_rejects_trailing_bytes(self) -> None:
        d = StrictDeserializer(b"\x01\x00")
        d.u8()
        with pytest.raises(DecodeError, match="trailing"):
            d.finish()

    def test_option_none_and_some(self) -> None:
        d = StrictDeserializer(b"\x00\x01\x2a")
        assert d.option(lambda x: x.u8()) is None
        assert d.option(lambda x: x.u8()) == 42

    def test_position_tracks_reads(self) -> None:
        d = StrictDeserializer(b"\x01\x02\x03\x04")
        d.u16()
        assert d.position == 2
        assert d.slice(0, d.position) == b"\x01\x02"


class TestDecoding:
    """Test that SDK decoder failures surface as DecodeError."""

    def test_wraps_sdk_errors(self) -> None:
        with pytest.raises(DecodeError, match="Invalid thing"):
            with decoding("thing"):
                StrictDeserializer(b"\x01").u64()

    def test_wraps_invalid_bool(self) -> None:
        with pytest.raises(DecodeError):
            with decoding("flag"):
                StrictDeserializer(b"\x02").bool()

    def test_wraps_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError):
            with decoding("identifier"):
                StrictDeserializer(b"\x02\xff\xfe").str()

    def test_decode_error_passes_through_unchanged(self) -> None:
        with pytest.raises(DecodeError, match="^Non-canonical"):
            with decoding("thing"):
                StrictDeserializer(b"\x80\x00").uleb128()
