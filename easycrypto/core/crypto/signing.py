"""
Digital signatures over one-shot and streamed messages.

Uses the ``cryptography`` library for signing and verification. Keys may be
passed as ``cryptography`` key objects or as PEM/DER encoded bytes or
strings. The padding/scheme follows the key type:

- RSA: PKCS#1 v1.5 with the named hash
- EC: ECDSA with the named hash
- DSA: DSA with the named hash
- Ed25519 / Ed448: pure EdDSA, no separate hash (``algorithm=None``)
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterable, Iterable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric import dsa, ec, ed448, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)
from cryptography.hazmat.primitives.serialization import (
    load_der_private_key,
    load_der_public_key,
    load_pem_private_key,
    load_pem_public_key,
)

from easycrypto.core.crypto.encoding import Data, format_output, parse_encoded, to_bytes
from easycrypto.core.crypto.hashing import resolve_hash_algorithm
from easycrypto.core.crypto.stream import Chunk, accumulate_stream
from easycrypto.core.logging import get_logger

logger = get_logger(__name__)

PrivateKeyInput = PrivateKeyTypes | str | bytes
PublicKeyInput = PublicKeyTypes | PrivateKeyTypes | str | bytes

_EDDSA_PRIVATE = (ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey)
_EDDSA_PUBLIC = (ed25519.Ed25519PublicKey, ed448.Ed448PublicKey)
_PRIVATE_KEY_TYPES = (
    rsa.RSAPrivateKey,
    ec.EllipticCurvePrivateKey,
    dsa.DSAPrivateKey,
    *_EDDSA_PRIVATE,
)


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


def _is_pem(data: bytes) -> bool:
    return data.lstrip().startswith(b"-----BEGIN")


def load_private_key(
    key: PrivateKeyInput, passphrase: str | bytes | None = None
) -> PrivateKeyTypes:
    """Return a private key object, parsing PEM or DER input if needed."""
    if not isinstance(key, (str, bytes)):
        return key
    data = _as_bytes(key)
    password = _as_bytes(passphrase) if passphrase is not None else None
    if _is_pem(data):
        return load_pem_private_key(data, password=password)
    return load_der_private_key(data, password=password)


def load_public_key(key: PublicKeyInput) -> PublicKeyTypes:
    """Return a public key object.

    Private keys (objects, PEM or DER) are accepted and reduced to their
    public half. Encrypted private keys must go through :func:`load_private_key`.
    """
    if isinstance(key, (str, bytes)):
        data = _as_bytes(key)
        if _is_pem(data):
            if b"PRIVATE KEY" in data:
                return load_pem_private_key(data, password=None).public_key()
            return load_pem_public_key(data)
        try:
            return load_der_public_key(data)
        except ValueError:
            return load_der_private_key(data, password=None).public_key()
    if isinstance(key, _PRIVATE_KEY_TYPES):
        return key.public_key()
    return key


def _sign_bytes(key: PrivateKeyTypes, algorithm: str | None, data: bytes) -> bytes:
    if isinstance(key, _EDDSA_PRIVATE):
        if algorithm is not None:
            raise ValueError("Ed25519/Ed448 keys sign without a separate hash algorithm")
        return key.sign(data)
    if algorithm is None:
        raise ValueError(f"A hash algorithm is required for {type(key).__name__}")

    hash_algorithm = resolve_hash_algorithm(algorithm)
    if isinstance(key, rsa.RSAPrivateKey):
        return key.sign(data, padding.PKCS1v15(), hash_algorithm)
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return key.sign(data, ec.ECDSA(hash_algorithm))
    if isinstance(key, dsa.DSAPrivateKey):
        return key.sign(data, hash_algorithm)
    raise TypeError(f"Unsupported private key type: {type(key).__name__}")


def _verify_bytes(
    key: PublicKeyTypes, algorithm: str | None, data: bytes, signature: bytes
) -> bool:
    try:
        if isinstance(key, _EDDSA_PUBLIC):
            if algorithm is not None:
                raise ValueError("Ed25519/Ed448 keys verify without a separate hash algorithm")
            key.verify(signature, data)
            return True
        if algorithm is None:
            raise ValueError(f"A hash algorithm is required for {type(key).__name__}")

        hash_algorithm = resolve_hash_algorithm(algorithm)
        if isinstance(key, rsa.RSAPublicKey):
            key.verify(signature, data, padding.PKCS1v15(), hash_algorithm)
        elif isinstance(key, ec.EllipticCurvePublicKey):
            key.verify(signature, data, ec.ECDSA(hash_algorithm))
        elif isinstance(key, dsa.DSAPublicKey):
            key.verify(signature, data, hash_algorithm)
        else:
            raise TypeError(f"Unsupported public key type: {type(key).__name__}")
        return True
    except InvalidSignature:
        logger.debug("signature_invalid", key_type=type(key).__name__, algorithm=algorithm)
        return False


def sign(
    private_key: PrivateKeyInput,
    algorithm: str | None,
    message: Data,
    input_encoding: str | None = None,
    output_encoding: str | None = None,
    *,
    passphrase: str | bytes | None = None,
) -> bytes | str:
    """Sign a message with a private key.

    Parameters
    ----------
    private_key:
        Key object, or PEM/DER encoded key (optionally encrypted with
        ``passphrase``).
    algorithm:
        Hash algorithm name, e.g. ``"sha256"``; ``None`` for EdDSA keys.
    message:
        Text or bytes; text is encoded with ``input_encoding`` (UTF-8 by
        default).
    output_encoding:
        ``None`` for raw bytes, ``"hex"`` or ``"base64"`` for text.

    Raises
    ------
    TypeError
        If the key type is not supported.
    ValueError
        If the algorithm does not fit the key or is unknown.
    """
    key = load_private_key(private_key, passphrase)
    signature = _sign_bytes(key, algorithm, to_bytes(message, input_encoding))
    return format_output(signature, output_encoding)


def verify_signature(
    public_key: PublicKeyInput,
    algorithm: str | None,
    message: Data,
    signature: Data,
    input_encoding: str | None = None,
    signature_encoding: str | None = None,
) -> bool:
    """Verify a signature on a message.

    Returns
    -------
    bool
        ``True`` if the signature is valid, ``False`` otherwise.
    """
    key = load_public_key(public_key)
    raw_signature = parse_encoded(signature, signature_encoding)
    return _verify_bytes(key, algorithm, to_bytes(message, input_encoding), raw_signature)


async def sign_stream(
    private_key: PrivateKeyInput,
    algorithm: str | None,
    source: AsyncIterable[Chunk] | Iterable[Chunk],
    input_encoding: str | None = None,
    output_encoding: str | None = None,
    *,
    passphrase: str | bytes | None = None,
) -> bytes | str:
    """Sign a message delivered as a stream of chunks.

    Raises
    ------
    EmptyStreamError
        If the stream ends without data.
    InconsistentChunkTypeError
        If text and binary chunks are mixed.
    """
    payload = await accumulate_stream(source, input_encoding)
    key = load_private_key(private_key, passphrase)
    signature = await asyncio.to_thread(_sign_bytes, key, algorithm, payload)
    return format_output(signature, output_encoding)


async def verify_signature_stream(
    public_key: PublicKeyInput,
    algorithm: str | None,
    source: AsyncIterable[Chunk] | Iterable[Chunk],
    signature: Data,
    input_encoding: str | None = None,
    signature_encoding: str | None = None,
) -> bool:
    """Verify a signature on a message delivered as a stream of chunks."""
    payload = await accumulate_stream(source, input_encoding)
    key = load_public_key(public_key)
    raw_signature = parse_encoded(signature, signature_encoding)
    return await asyncio.to_thread(_verify_bytes, key, algorithm, payload, raw_signature)
