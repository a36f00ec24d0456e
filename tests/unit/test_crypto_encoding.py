"""Tests for input coercion and output formatting helpers."""

from __future__ import annotations

import pytest

from easycrypto.core.crypto.encoding import format_output, parse_encoded, to_bytes


class TestToBytes:
    def test_default_is_utf8(self) -> None:
        assert to_bytes("é") == b"\xc3\xa9"

    def test_bytes_pass_through(self) -> None:
        assert to_bytes(b"\xff", "hex") == b"\xff"
        assert to_bytes(memoryview(b"ab")) == b"ab"

    def test_hex(self) -> None:
        assert to_bytes("00ff", "HEX") == b"\x00\xff"

    def test_invalid_base64(self) -> None:
        with pytest.raises(ValueError, match="base64"):
            to_bytes("not base64!", "base64")

    def test_codec_names(self) -> None:
        assert to_bytes("é", "latin-1") == b"\xe9"
        assert to_bytes("é", "utf8") == b"\xc3\xa9"


class TestFormatOutput:
    def test_raw(self) -> None:
        assert format_output(b"\x01\x02") == b"\x01\x02"

    def test_hex_and_base64(self) -> None:
        assert format_output(b"\x01\x02", "hex") == "0102"
        assert format_output(b"\x01\x02", "base64") == "AQI="


class TestParseEncoded:
    def test_inverse_of_format_output(self) -> None:
        for encoding in ("hex", "base64"):
            encoded = format_output(b"\x00signature\xff", encoding)
            assert parse_encoded(encoded, encoding) == b"\x00signature\xff"

    def test_encoded_bytes(self) -> None:
        assert parse_encoded(b"0102", "hex") == b"\x01\x02"

    def test_raw_bytes(self) -> None:
        assert parse_encoded(bytearray(b"\x01")) == b"\x01"

    def test_text_codec_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported signature encoding"):
            parse_encoded("abc", "utf-8")
