"""
Password hashing, verification and key derivation.

Uses the ``cryptography`` library's scrypt KDF for password hashes and
PBKDF2-HMAC for general-purpose key derivation. Hashes are stored as DER
envelopes (see :mod:`easycrypto.core.crypto.envelope`) that name the
algorithm used, so stale credentials can be detected and rehashed.

Every blocking call has an ``*_async`` twin that runs the derivation on a
worker thread, keeping the event loop free while scrypt burns CPU and
memory. Callers are expected to bound how many of these run at once.
"""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from easycrypto.core.config import get_settings
from easycrypto.core.crypto.encoding import Data, to_bytes
from easycrypto.core.crypto.envelope import (
    CURRENT_ALGORITHM,
    CredentialEnvelope,
    decode_envelope,
    encode_envelope,
)
from easycrypto.core.crypto.errors import DerivationError, InvalidHashError
from easycrypto.core.crypto.hashing import resolve_hash_algorithm
from easycrypto.core.logging import get_logger

logger = get_logger(__name__)

SALT_BYTES = 32
HASH_LENGTH = 64


@dataclass(frozen=True, slots=True)
class ScryptParams:
    """scrypt cost parameters (N, r, p)."""

    cost: int = 16384
    block_size: int = 8
    parallelization: int = 1

    @classmethod
    def from_settings(cls) -> ScryptParams:
        """Build the parameters implied by ``HashAlgorithm.SCRYPT`` in this deployment."""
        settings = get_settings()
        return cls(
            cost=settings.scrypt_cost,
            block_size=settings.scrypt_block_size,
            parallelization=settings.scrypt_parallelization,
        )


def constant_time_equal(a: bytes, b: bytes) -> bool:
    """Compare two byte strings in time independent of their contents.

    Returns ``False`` for inputs of different lengths.
    """
    return constant_time.bytes_eq(bytes(a), bytes(b))


def _scrypt(password: bytes, salt: bytes, length: int, params: ScryptParams) -> bytes:
    try:
        kdf = Scrypt(
            salt=salt,
            length=length,
            n=params.cost,
            r=params.block_size,
            p=params.parallelization,
        )
        return kdf.derive(password)
    except (ValueError, MemoryError, UnsupportedAlgorithm) as exc:
        logger.warning(
            "scrypt_derivation_failed",
            cost=params.cost,
            block_size=params.block_size,
            parallelization=params.parallelization,
            length=length,
            exc_info=True,
        )
        raise DerivationError(f"scrypt derivation failed: {exc}") from exc


def hash_password(password: Data, params: ScryptParams | None = None) -> bytes:
    """Hash a password for storage.

    A fresh 32-byte salt is drawn for every call, so hashing the same
    password twice yields two different envelopes.

    Parameters
    ----------
    password:
        The password; text is encoded as UTF-8.
    params:
        scrypt cost parameters. Defaults to the configured ones.

    Returns
    -------
    bytes
        DER-encoded password envelope.

    Raises
    ------
    DerivationError
        If scrypt rejects the parameters or runs out of resources.
    """
    params = params or ScryptParams.from_settings()
    salt = os.urandom(SALT_BYTES)
    derived = _scrypt(to_bytes(password), salt, HASH_LENGTH, params)
    envelope = CredentialEnvelope(
        algorithm=CURRENT_ALGORITHM,
        salt=salt,
        length=HASH_LENGTH,
        hash=derived,
    )
    logger.debug("password_hashed", algorithm=CURRENT_ALGORITHM.name, cost=params.cost)
    return encode_envelope(envelope)


async def hash_password_async(
    password: Data, params: ScryptParams | None = None
) -> bytes:
    """Non-blocking :func:`hash_password`."""
    return await asyncio.to_thread(hash_password, password, params)


def _checked_envelope(stored: bytes) -> CredentialEnvelope:
    envelope = decode_envelope(stored)
    if not envelope.is_current:
        logger.warning(
            "password_rehash_required",
            algorithm=envelope.algorithm.name,
            length=envelope.length,
            hash_length=len(envelope.hash),
        )
        raise InvalidHashError()
    return envelope


def verify_hash(
    stored: bytes, password: Data, params: ScryptParams | None = None
) -> bool:
    """Verify a password against a stored envelope.

    Parameters
    ----------
    stored:
        Envelope bytes produced by :func:`hash_password`.
    password:
        The candidate password.
    params:
        scrypt cost parameters the envelope was hashed with. Defaults to
        the configured ones.

    Returns
    -------
    bool
        ``True`` if the password matches. A mismatch is not an error.

    Raises
    ------
    MalformedEnvelopeError
        If ``stored`` does not parse.
    InvalidHashError
        If the envelope uses a retired algorithm or its length field
        disagrees with the stored hash; the credential must be rehashed.
    DerivationError
        If scrypt fails.
    """
    envelope = _checked_envelope(stored)
    params = params or ScryptParams.from_settings()
    recomputed = _scrypt(to_bytes(password), envelope.salt, envelope.length, params)
    return constant_time_equal(recomputed, envelope.hash)


async def verify_hash_async(
    stored: bytes, password: Data, params: ScryptParams | None = None
) -> bool:
    """Non-blocking :func:`verify_hash`."""
    return await asyncio.to_thread(verify_hash, stored, password, params)


def needs_rehash(stored: bytes) -> bool:
    """Return ``True`` if ``verify_hash`` would reject the envelope as stale."""
    return not decode_envelope(stored).is_current


def derive_key(
    password: Data,
    salt: Data,
    iterations: int,
    length: int,
    digest: str = "sha256",
) -> bytes:
    """Derive a key from a password with PBKDF2-HMAC.

    The salt should be random and at least 16 bytes long (NIST SP 800-132).

    Raises
    ------
    ValueError
        If ``digest`` names an unsupported hash algorithm.
    DerivationError
        If the iteration count or length is rejected by the primitive.
    """
    algorithm = resolve_hash_algorithm(digest)
    if iterations < 1:
        raise DerivationError(f"iterations must be at least 1, got {iterations}")
    try:
        kdf = PBKDF2HMAC(
            algorithm=algorithm,
            length=length,
            salt=to_bytes(salt),
            iterations=iterations,
        )
        return kdf.derive(to_bytes(password))
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise DerivationError(f"PBKDF2 derivation failed: {exc}") from exc


async def derive_key_async(
    password: Data,
    salt: Data,
    iterations: int,
    length: int,
    digest: str = "sha256",
) -> bytes:
    """Non-blocking :func:`derive_key`."""
    return await asyncio.to_thread(derive_key, password, salt, iterations, length, digest)
