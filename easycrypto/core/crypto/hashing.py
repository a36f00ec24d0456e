"""Message digests over one-shot and streamed input."""

from __future__ import annotations

import asyncio
import re
from collections.abc import AsyncIterable, Callable, Iterable

from cryptography.hazmat.primitives import hashes

from easycrypto.core.crypto.encoding import Data, format_output, to_bytes
from easycrypto.core.crypto.stream import Chunk, accumulate_stream

_HASH_ALGORITHMS: dict[str, Callable[[], hashes.HashAlgorithm]] = {
    "md5": hashes.MD5,
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512-224": hashes.SHA512_224,
    "sha512-256": hashes.SHA512_256,
    "sha3-224": hashes.SHA3_224,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
    "blake2b": lambda: hashes.BLAKE2b(64),
    "blake2s": lambda: hashes.BLAKE2s(32),
}

_SHA_DASH = re.compile(r"^sha-(\d)")


def resolve_hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """Look up a ``cryptography`` hash algorithm by its common name.

    Names are case-insensitive; ``sha-256``, ``SHA256``, ``sha3_256`` and
    ``RSA-SHA256`` style spellings are accepted.

    Raises
    ------
    ValueError
        If the name is not a supported hash algorithm.
    """
    normalized = name.strip().lower().replace("_", "-")
    normalized = normalized.removeprefix("rsa-")
    normalized = _SHA_DASH.sub(r"sha\1", normalized)
    factory = _HASH_ALGORITHMS.get(normalized)
    if factory is None:
        raise ValueError(f"Unsupported hash algorithm: {name}")
    return factory()


def _compute(algorithm: str, data: bytes) -> bytes:
    hasher = hashes.Hash(resolve_hash_algorithm(algorithm))
    hasher.update(data)
    return hasher.finalize()


def digest(
    algorithm: str,
    message: Data,
    input_encoding: str | None = None,
    output_encoding: str | None = None,
) -> bytes | str:
    """Hash a message with the named algorithm.

    Parameters
    ----------
    algorithm:
        Hash algorithm name, e.g. ``"sha256"``.
    message:
        Text or bytes. Text is encoded with ``input_encoding`` (UTF-8 by
        default); bytes ignore it.
    output_encoding:
        ``None`` for raw bytes, ``"hex"`` or ``"base64"`` for text.
    """
    return format_output(_compute(algorithm, to_bytes(message, input_encoding)), output_encoding)


async def digest_stream(
    algorithm: str,
    source: AsyncIterable[Chunk] | Iterable[Chunk],
    input_encoding: str | None = None,
    output_encoding: str | None = None,
) -> bytes | str:
    """Hash a message delivered as a stream of chunks.

    The stream is fully accumulated before hashing, so the result equals
    :func:`digest` over the concatenated chunks.

    Raises
    ------
    EmptyStreamError
        If the stream ends without data.
    InconsistentChunkTypeError
        If text and binary chunks are mixed.
    """
    payload = await accumulate_stream(source, input_encoding)
    return format_output(await asyncio.to_thread(_compute, algorithm, payload), output_encoding)
