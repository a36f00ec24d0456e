"""
Binary envelope codec for stored password hashes.

An envelope records everything needed to verify a password later: which
derivation algorithm produced the hash, the salt, the expected hash length
and the hash itself. It is serialized as DER using ``asn1crypto``::

    PasswordEnvelope ::= SEQUENCE {
        algorithm INTEGER,
        salt      OCTET STRING,
        length    INTEGER,
        hash      OCTET STRING
    }

DER is tag-length-value, so the layout is self-describing and stable. The
algorithm travels as a plain INTEGER; mapping it onto ``HashAlgorithm``
happens after parsing, which keeps envelopes with retired or future codes
decodable. Field order must never change once envelopes have been stored.

Decoding performs no cryptographic validation; that is the verifier's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

from asn1crypto import core  # type: ignore[import-untyped]

from easycrypto.core.crypto.errors import MalformedEnvelopeError
from easycrypto.core.logging import get_logger

logger = get_logger(__name__)


class HashAlgorithm(IntEnum):
    """Password derivation algorithms known to the codec.

    ``INVALID`` stands for every code that is not (or no longer) accepted.
    """

    INVALID = 0
    SCRYPT = 1

    @classmethod
    def from_code(cls, code: int) -> HashAlgorithm:
        """Map a wire code onto a member, folding unknown codes into ``INVALID``."""
        try:
            return cls(code)
        except ValueError:
            return cls.INVALID


# The algorithm new hashes are produced with and old ones are checked against.
CURRENT_ALGORITHM = HashAlgorithm.SCRYPT


class PasswordEnvelope(core.Sequence):  # type: ignore[misc]
    """ASN.1 schema of the persisted envelope."""

    _fields = [
        ("algorithm", core.Integer),
        ("salt", core.OctetString),
        ("length", core.Integer),
        ("hash", core.OctetString),
    ]


@dataclass(frozen=True, slots=True)
class CredentialEnvelope:
    """Decoded form of a stored password hash."""

    algorithm: HashAlgorithm
    salt: bytes
    length: int
    hash: bytes

    @property
    def is_current(self) -> bool:
        """``True`` if the envelope can be verified without a rehash."""
        return (
            self.algorithm is CURRENT_ALGORITHM
            and self.length > 0
            and self.length == len(self.hash)
        )


def encode(
    algorithm: HashAlgorithm | int,
    salt: bytes,
    length: int,
    hash: bytes,  # noqa: A002
) -> bytes:
    """Serialize the four envelope fields to DER bytes.

    Raises
    ------
    ValueError
        If ``length`` or the algorithm code is negative.
    """
    if length < 0:
        raise ValueError(f"length must be non-negative, got {length}")
    if int(algorithm) < 0:
        raise ValueError(f"algorithm code must be non-negative, got {int(algorithm)}")

    envelope = PasswordEnvelope(
        {
            "algorithm": int(algorithm),
            "salt": bytes(salt),
            "length": length,
            "hash": bytes(hash),
        }
    )
    return bytes(envelope.dump())


def encode_envelope(envelope: CredentialEnvelope) -> bytes:
    """Serialize a :class:`CredentialEnvelope` to DER bytes."""
    return encode(envelope.algorithm, envelope.salt, envelope.length, envelope.hash)


def decode_envelope(data: bytes | bytearray | memoryview) -> CredentialEnvelope:
    """Parse DER bytes into a :class:`CredentialEnvelope`.

    Raises
    ------
    MalformedEnvelopeError
        If ``data`` is not bytes-like, is truncated, carries trailing bytes,
        has unexpected tags or missing fields, or holds a negative integer.
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise MalformedEnvelopeError(
            f"Expected a bytes-like envelope, got {type(data).__name__}"
        )

    try:
        parsed = PasswordEnvelope.load(bytes(data), strict=True)
        fields = parsed.native
    except (ValueError, TypeError) as exc:
        logger.debug("envelope_decode_failed", size=len(data), error=str(exc))
        raise MalformedEnvelopeError("Envelope does not parse as a password envelope") from exc

    algorithm = fields.get("algorithm")
    salt = fields.get("salt")
    length = fields.get("length")
    hashed = fields.get("hash")

    if not isinstance(algorithm, int) or not isinstance(length, int):
        raise MalformedEnvelopeError("Envelope is missing its integer fields")
    if not isinstance(salt, bytes) or not isinstance(hashed, bytes):
        raise MalformedEnvelopeError("Envelope is missing its byte fields")
    if algorithm < 0:
        raise MalformedEnvelopeError(f"Impossible algorithm code {algorithm}")
    if length < 0:
        raise MalformedEnvelopeError(f"Impossible hash length {length}")

    return CredentialEnvelope(
        algorithm=HashAlgorithm.from_code(algorithm),
        salt=salt,
        length=length,
        hash=hashed,
    )
