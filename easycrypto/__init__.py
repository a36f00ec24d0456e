"""easycrypto: password hashing envelopes and streamed digests/signatures."""

from easycrypto.core.crypto import (
    CURRENT_ALGORITHM,
    AccumulatorState,
    ChunkKind,
    CredentialEnvelope,
    CryptoError,
    DerivationError,
    EmptyStreamError,
    HashAlgorithm,
    InconsistentChunkTypeError,
    InvalidHashError,
    MalformedEnvelopeError,
    ScryptParams,
    StreamAccumulator,
    StreamError,
    accumulate,
    accumulate_stream,
    constant_time_equal,
    decode_envelope,
    derive_key,
    derive_key_async,
    digest,
    digest_stream,
    encode,
    encode_envelope,
    hash_password,
    hash_password_async,
    needs_rehash,
    sign,
    sign_stream,
    verify_hash,
    verify_hash_async,
    verify_signature,
    verify_signature_stream,
)

__version__ = "0.2.0"

__all__ = [
    "CURRENT_ALGORITHM",
    "AccumulatorState",
    "ChunkKind",
    "CredentialEnvelope",
    "CryptoError",
    "DerivationError",
    "EmptyStreamError",
    "HashAlgorithm",
    "InconsistentChunkTypeError",
    "InvalidHashError",
    "MalformedEnvelopeError",
    "ScryptParams",
    "StreamAccumulator",
    "StreamError",
    "accumulate",
    "accumulate_stream",
    "constant_time_equal",
    "decode_envelope",
    "derive_key",
    "derive_key_async",
    "digest",
    "digest_stream",
    "encode",
    "encode_envelope",
    "hash_password",
    "hash_password_async",
    "needs_rehash",
    "sign",
    "sign_stream",
    "verify_hash",
    "verify_hash_async",
    "verify_signature",
    "verify_signature_stream",
]
