"""Error taxonomy for credential hashing and streaming digests/signatures.

A failed password match is not an error: ``verify_hash`` returns ``False``.
``InvalidHashError`` is reserved for envelopes that parse but must be
rehashed, so callers can tell "wrong password" from "stale credential".
"""

from __future__ import annotations


class CryptoError(Exception):
    """Base class for all errors raised by easycrypto."""


class MalformedEnvelopeError(CryptoError, ValueError):
    """Raised when stored bytes do not parse as a password envelope."""


class InvalidHashError(CryptoError):
    """Raised when an envelope carries a deprecated algorithm or a length mismatch.

    The credential itself may be fine; it needs to be rehashed with the
    currently valid algorithm on the next successful login.
    """

    def __init__(self, message: str = "Invalid algorithm, rehash required.") -> None:
        super().__init__(message)


class DerivationError(CryptoError):
    """Raised when the underlying key derivation primitive fails."""


class StreamError(CryptoError):
    """Base class for chunk stream accumulation failures."""


class EmptyStreamError(StreamError):
    """Raised when a stream ends before delivering any chunk."""


class InconsistentChunkTypeError(StreamError):
    """Raised when text and binary chunks are mixed within one stream."""
