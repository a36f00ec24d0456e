"""
Credential hashing and streamed digest/signature primitives.

Library modules built on the ``cryptography`` package:
- **envelope**: DER codec for stored password hashes
- **password**: scrypt password hashing/verification, PBKDF2 key derivation
- **stream**: text/binary chunk stream accumulation
- **hashing**: message digests over one-shot and streamed input
- **signing**: RSA/EC/DSA/EdDSA signatures over one-shot and streamed input
- **errors**: error taxonomy shared by the modules above
"""

from easycrypto.core.crypto.envelope import (
    CURRENT_ALGORITHM,
    CredentialEnvelope,
    HashAlgorithm,
    decode_envelope,
    encode,
    encode_envelope,
)
from easycrypto.core.crypto.errors import (
    CryptoError,
    DerivationError,
    EmptyStreamError,
    InconsistentChunkTypeError,
    InvalidHashError,
    MalformedEnvelopeError,
    StreamError,
)
from easycrypto.core.crypto.hashing import digest, digest_stream, resolve_hash_algorithm
from easycrypto.core.crypto.password import (
    HASH_LENGTH,
    SALT_BYTES,
    ScryptParams,
    constant_time_equal,
    derive_key,
    derive_key_async,
    hash_password,
    hash_password_async,
    needs_rehash,
    verify_hash,
    verify_hash_async,
)
from easycrypto.core.crypto.signing import (
    sign,
    sign_stream,
    verify_signature,
    verify_signature_stream,
)
from easycrypto.core.crypto.stream import (
    AccumulatorState,
    ChunkKind,
    StreamAccumulator,
    accumulate,
    accumulate_stream,
)

__all__ = [
    "CURRENT_ALGORITHM",
    "CredentialEnvelope",
    "HashAlgorithm",
    "decode_envelope",
    "encode",
    "encode_envelope",
    "CryptoError",
    "DerivationError",
    "EmptyStreamError",
    "InconsistentChunkTypeError",
    "InvalidHashError",
    "MalformedEnvelopeError",
    "StreamError",
    "digest",
    "digest_stream",
    "resolve_hash_algorithm",
    "HASH_LENGTH",
    "SALT_BYTES",
    "ScryptParams",
    "constant_time_equal",
    "derive_key",
    "derive_key_async",
    "hash_password",
    "hash_password_async",
    "needs_rehash",
    "verify_hash",
    "verify_hash_async",
    "sign",
    "sign_stream",
    "verify_signature",
    "verify_signature_stream",
    "AccumulatorState",
    "ChunkKind",
    "StreamAccumulator",
    "accumulate",
    "accumulate_stream",
]
