"""Input coercion and output formatting shared by the digest and signature wrappers.

Text is converted to bytes with ``input_encoding`` before it reaches a
primitive. ``hex`` and ``base64`` are treated as binary-to-text encodings;
every other name is looked up as a Python codec (``utf-8``, ``latin-1``, ...).
Binary input is passed through untouched and the encoding is ignored.
"""

from __future__ import annotations

import base64
import binascii

Data = str | bytes | bytearray | memoryview

DEFAULT_INPUT_ENCODING = "utf-8"

_HEX = "hex"
_BASE64 = "base64"


def _normalize(encoding: str) -> str:
    return encoding.strip().lower()


def to_bytes(message: Data, input_encoding: str | None = None) -> bytes:
    """Return ``message`` as bytes.

    Raises
    ------
    TypeError
        If ``message`` is neither text nor bytes-like.
    ValueError
        If ``input_encoding`` is unknown or ``message`` is not valid in it.
    """
    if isinstance(message, (bytes, bytearray, memoryview)):
        return bytes(message)
    if not isinstance(message, str):
        raise TypeError(
            f"Expected str or bytes-like data, got {type(message).__name__}"
        )

    encoding = _normalize(input_encoding or DEFAULT_INPUT_ENCODING)
    if encoding == _HEX:
        return bytes.fromhex(message)
    if encoding == _BASE64:
        try:
            return base64.b64decode(message, validate=True)
        except binascii.Error as exc:
            raise ValueError("message is not valid base64") from exc
    try:
        return message.encode(encoding)
    except LookupError as exc:
        raise ValueError(f"Unsupported input encoding: {input_encoding}") from exc


def format_output(data: bytes, output_encoding: str | None = None) -> bytes | str:
    """Render primitive output as raw bytes, or as ``hex``/``base64`` text."""
    if output_encoding is None:
        return data
    encoding = _normalize(output_encoding)
    if encoding == _HEX:
        return data.hex()
    if encoding == _BASE64:
        return base64.b64encode(data).decode("ascii")
    raise ValueError(f"Unsupported output encoding: {output_encoding}")


def parse_encoded(value: Data, encoding: str | None = None) -> bytes:
    """Inverse of :func:`format_output`, used for caller-supplied signatures."""
    if encoding is None:
        if isinstance(value, str):
            raise TypeError("A signature encoding is required for str signatures")
        return bytes(value)
    normalized = _normalize(encoding)
    if normalized not in (_HEX, _BASE64):
        raise ValueError(f"Unsupported signature encoding: {encoding}")
    if isinstance(value, (bytes, bytearray, memoryview)):
        value = bytes(value).decode("ascii")
    return to_bytes(value, normalized)
