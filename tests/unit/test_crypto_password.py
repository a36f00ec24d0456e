"""Tests for scrypt password hashing, verification and PBKDF2 key derivation."""

from __future__ import annotations

import pytest

from easycrypto.core.crypto import password as password_module
from easycrypto.core.crypto.envelope import HashAlgorithm, decode_envelope, encode
from easycrypto.core.crypto.errors import (
    DerivationError,
    InvalidHashError,
    MalformedEnvelopeError,
)
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

PASSPHRASE = "correct horse battery staple"
FAST_PARAMS = ScryptParams(cost=1024, block_size=8, parallelization=1)


def _reencode(stored: bytes, **overrides: object) -> bytes:
    """Re-encode a stored envelope with some fields replaced."""
    decoded = decode_envelope(stored)
    fields: dict[str, object] = {
        "algorithm": decoded.algorithm,
        "salt": decoded.salt,
        "length": decoded.length,
        "hash": decoded.hash,
    }
    fields.update(overrides)
    return encode(**fields)  # type: ignore[arg-type]


class TestHashPassword:
    """Tests for envelope production."""

    def test_envelope_layout(self) -> None:
        stored = hash_password(PASSPHRASE)
        decoded = decode_envelope(stored)
        assert decoded.algorithm is HashAlgorithm.SCRYPT
        assert len(decoded.salt) == SALT_BYTES == 32
        assert decoded.length == HASH_LENGTH == 64
        assert len(decoded.hash) == 64

    def test_fresh_salt_every_call(self) -> None:
        first = hash_password(PASSPHRASE)
        second = hash_password(PASSPHRASE)
        assert first != second
        assert decode_envelope(first).salt != decode_envelope(second).salt
        assert verify_hash(first, PASSPHRASE)
        assert verify_hash(second, PASSPHRASE)

    def test_invalid_cost_raises_derivation_error(self) -> None:
        with pytest.raises(DerivationError):
            hash_password(PASSPHRASE, ScryptParams(cost=3))

    def test_invalid_block_size_raises_derivation_error(self) -> None:
        with pytest.raises(DerivationError):
            hash_password(PASSPHRASE, ScryptParams(block_size=0))

    def test_settings_drive_default_params(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("EASYCRYPTO_SCRYPT_COST", "1024")
        stored = hash_password(PASSPHRASE)
        assert verify_hash(stored, PASSPHRASE, FAST_PARAMS)


class TestVerifyHash:
    """Tests for envelope verification."""

    def test_correct_password(self) -> None:
        stored = hash_password(PASSPHRASE)
        assert verify_hash(stored, PASSPHRASE) is True

    def test_wrong_password(self) -> None:
        stored = hash_password(PASSPHRASE)
        assert verify_hash(stored, "Hello, World!") is False

    def test_text_and_utf8_bytes_are_equivalent(self) -> None:
        stored = hash_password("pässwörd")
        assert verify_hash(stored, "pässwörd".encode("utf-8"))

    def test_bytes_password(self) -> None:
        stored = hash_password(b"\x00\xffraw", FAST_PARAMS)
        assert verify_hash(stored, b"\x00\xffraw", FAST_PARAMS)
        assert not verify_hash(stored, b"\x00\xferaw", FAST_PARAMS)

    def test_params_must_match(self) -> None:
        stored = hash_password(PASSPHRASE, FAST_PARAMS)
        assert verify_hash(stored, PASSPHRASE, FAST_PARAMS)
        assert not verify_hash(stored, PASSPHRASE)

    def test_invalid_algorithm_requires_rehash(self) -> None:
        stored = _reencode(hash_password(PASSPHRASE), algorithm=HashAlgorithm.INVALID)
        with pytest.raises(InvalidHashError, match="rehash"):
            verify_hash(stored, PASSPHRASE)

    def test_unknown_algorithm_code_requires_rehash(self) -> None:
        stored = _reencode(hash_password(PASSPHRASE), algorithm=7)
        with pytest.raises(InvalidHashError):
            verify_hash(stored, PASSPHRASE)

    def test_length_mismatch_requires_rehash(self) -> None:
        stored = _reencode(hash_password(PASSPHRASE), length=32)
        with pytest.raises(InvalidHashError):
            verify_hash(stored, PASSPHRASE)

    def test_invalid_hash_raised_even_for_wrong_password(self) -> None:
        stored = _reencode(hash_password(PASSPHRASE), algorithm=HashAlgorithm.INVALID)
        with pytest.raises(InvalidHashError):
            verify_hash(stored, "Hello, World!")

    def test_malformed_envelope(self) -> None:
        stored = hash_password(PASSPHRASE)
        with pytest.raises(MalformedEnvelopeError):
            verify_hash(stored[:-3], PASSPHRASE)

    def test_comparison_is_constant_time(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[tuple[bytes, bytes]] = []
        real = password_module.constant_time_equal

        def spy(a: bytes, b: bytes) -> bool:
            calls.append((a, b))
            return real(a, b)

        monkeypatch.setattr(password_module, "constant_time_equal", spy)
        stored = hash_password(PASSPHRASE, FAST_PARAMS)
        assert verify_hash(stored, PASSPHRASE, FAST_PARAMS)
        assert len(calls) == 1
        assert calls[0][1] == decode_envelope(stored).hash


class TestNeedsRehash:
    def test_fresh_hash(self) -> None:
        assert not needs_rehash(hash_password(PASSPHRASE, FAST_PARAMS))

    def test_stale_hash(self) -> None:
        stored = _reencode(
            hash_password(PASSPHRASE, FAST_PARAMS), algorithm=HashAlgorithm.INVALID
        )
        assert needs_rehash(stored)

    def test_malformed(self) -> None:
        with pytest.raises(MalformedEnvelopeError):
            needs_rehash(b"\x30\x03\x02\x01")


class TestAsync:
    """The async variants produce the same results as the blocking ones."""

    @pytest.mark.asyncio
    async def test_hash_async_verify_sync(self) -> None:
        stored = await hash_password_async(PASSPHRASE)
        assert verify_hash(stored, PASSPHRASE)

    @pytest.mark.asyncio
    async def test_hash_sync_verify_async(self) -> None:
        stored = hash_password(PASSPHRASE)
        assert await verify_hash_async(stored, PASSPHRASE) is True
        assert await verify_hash_async(stored, "Hello, World!") is False

    @pytest.mark.asyncio
    async def test_async_rehash_error(self) -> None:
        stored = _reencode(
            await hash_password_async(PASSPHRASE, FAST_PARAMS),
            algorithm=HashAlgorithm.INVALID,
        )
        with pytest.raises(InvalidHashError):
            await verify_hash_async(stored, PASSPHRASE, FAST_PARAMS)

    @pytest.mark.asyncio
    async def test_async_derivation_error(self) -> None:
        with pytest.raises(DerivationError):
            await hash_password_async(PASSPHRASE, ScryptParams(cost=1000))


class TestConstantTimeEqual:
    def test_equal(self) -> None:
        assert constant_time_equal(b"abc", b"abc")

    def test_different(self) -> None:
        assert not constant_time_equal(b"abc", b"abd")

    def test_different_lengths(self) -> None:
        assert not constant_time_equal(b"abc", b"abcd")

    def test_bytearray_input(self) -> None:
        assert constant_time_equal(bytearray(b"abc"), b"abc")  # type: ignore[arg-type]


class TestDeriveKey:
    """PBKDF2-HMAC key derivation."""

    def test_rfc6070_vector(self) -> None:
        key = derive_key("password", "salt", 1, 20, "sha1")
        assert key.hex() == "0c60c80f961f0e71f3a9b524af6012062fe037a6"

    def test_rfc6070_vector_two_iterations(self) -> None:
        key = derive_key(b"password", b"salt", 2, 20, "sha1")
        assert key.hex() == "ea6c014dc72d6f8ccd1ed92ace1d41f0d8de8957"

    def test_default_digest_length(self) -> None:
        assert len(derive_key("pw", b"s" * 16, 1000, 32)) == 32

    def test_zero_iterations(self) -> None:
        with pytest.raises(DerivationError):
            derive_key("pw", b"s" * 16, 0, 32)

    def test_unknown_digest(self) -> None:
        with pytest.raises(ValueError, match="Unsupported hash algorithm"):
            derive_key("pw", b"s" * 16, 1, 32, "whirlpool")

    @pytest.mark.asyncio
    async def test_async_matches_sync(self) -> None:
        expected = derive_key("pw", b"s" * 16, 100, 32, "sha512")
        assert await derive_key_async("pw", b"s" * 16, 100, 32, "sha512") == expected
