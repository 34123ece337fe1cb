"""
Unit-тесты для stateful адаптеров.

Проверяет:
- Два независимых контекста (encrypt/decrypt) на экземпляр
- In-place обработку буферов (bytearray, memoryview, ошибки)
- Эквивалентность stateful и stateless результатов
- Чередование вызовов и смену ключей
- close() и context manager

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

import array
import os
from typing import Generator, Type

import pytest

from crypter.algorithms.backends import is_available
from crypter.algorithms.ciphers import (
    CIPHER_TABLE,
    STATEFUL_CIPHERS,
    STATELESS_CIPHERS,
    Aes128Ctr,
    Aes256Ctr,
    StatefulAes128Cbc,
    StatefulAes128Ctr,
    StatefulAes128Gcm,
    StatefulAes256Ctr,
    StatefulCipher,
)
from crypter.core.context import Direction
from crypter.core.exceptions import (
    AuthenticationError,
    ContextStateError,
    InvalidBufferError,
    InvalidIVError,
    InvalidKeyError,
)
from crypter.core.metadata import CipherSpec

AVAILABLE_SPECS = [spec for spec in CIPHER_TABLE if is_available(spec)]

SECRET_MESSAGE = b"this is a super secret message"


def random_key_iv(spec: CipherSpec) -> tuple:
    return os.urandom(spec.key_length), os.urandom(spec.iv_length)


# ==============================================================================
# FIXTURES
# ==============================================================================


@pytest.fixture
def ctr() -> Generator[StatefulAes128Ctr, None, None]:
    """Stateful AES-128-CTR."""
    with StatefulAes128Ctr() as crypter:
        yield crypter


@pytest.fixture
def gcm() -> Generator[StatefulAes128Gcm, None, None]:
    """Stateful AES-128-GCM."""
    with StatefulAes128Gcm() as crypter:
        yield crypter


# ==============================================================================
# CONSTRUCTION
# ==============================================================================


class TestConstruction:
    """Тесты конструктора и контекстов."""

    def test_two_independent_contexts(self, ctr: StatefulAes128Ctr) -> None:
        assert ctr.encryption_context is not ctr.decryption_context
        assert ctr.encryption_context.direction == Direction.ENCRYPT
        assert ctr.decryption_context.direction == Direction.DECRYPT

    def test_contexts_primed_but_unbound(self, ctr: StatefulAes128Ctr) -> None:
        """Контексты созданы, ключ/IV ещё не привязаны."""
        assert not ctr.encryption_context.is_bound
        assert not ctr.decryption_context.is_bound
        assert ctr.encryption_context.spec is ctr.spec

    def test_encrypt_only_instance_keeps_decrypt_context(
        self, ctr: StatefulAes128Ctr
    ) -> None:
        key, iv = random_key_iv(ctr.spec)
        decryptor = ctr.decryption_context

        for _ in range(3):
            ctr.encrypt(key, iv, bytearray(b"data"))

        assert ctr.decryption_context is decryptor
        assert decryptor.operation_count == 0
        assert ctr.encryption_context.operation_count == 3

    def test_lengths_on_class_and_instance(self, ctr: StatefulAes128Ctr) -> None:
        assert StatefulAes128Ctr.key_length() == ctr.key_length() == 16
        assert StatefulAes128Ctr.iv_length() == 16
        assert StatefulAes128Cbc.block_length() == 16

    @pytest.mark.parametrize("spec", CIPHER_TABLE, ids=lambda s: s.name)
    def test_lengths_match_stateless(self, spec: CipherSpec) -> None:
        stateful: Type[StatefulCipher] = STATEFUL_CIPHERS[spec.identifier]
        stateless = STATELESS_CIPHERS[spec.identifier]

        assert stateful.key_length() == stateless.key_length()
        assert stateful.iv_length() == stateless.iv_length()
        assert stateful.block_length() == stateless.block_length()


# ==============================================================================
# EQUIVALENCE
# ==============================================================================


class TestEquivalence:
    """Stateful и stateless адаптеры дают одинаковый результат."""

    @pytest.mark.parametrize("spec", AVAILABLE_SPECS, ids=lambda s: s.name)
    def test_encrypt_matches_stateless(self, spec: CipherSpec) -> None:
        stateless = STATELESS_CIPHERS[spec.identifier]
        key, iv = random_key_iv(spec)

        with STATEFUL_CIPHERS[spec.identifier]() as crypter:
            buffer = bytearray(SECRET_MESSAGE)
            crypter.encrypt(key, iv, buffer)
            assert bytes(buffer) == stateless.encrypt(key, iv, SECRET_MESSAGE)

            crypter.decrypt(key, iv, buffer)
            assert bytes(buffer) == SECRET_MESSAGE

    @pytest.mark.parametrize("spec", AVAILABLE_SPECS, ids=lambda s: s.name)
    def test_onetime_matches_stateless(self, spec: CipherSpec) -> None:
        stateless = STATELESS_CIPHERS[spec.identifier]
        key = os.urandom(spec.key_length)

        with STATEFUL_CIPHERS[spec.identifier]() as crypter:
            buffer = bytearray(SECRET_MESSAGE)
            crypter.onetime_encrypt(key, buffer)
            assert bytes(buffer) == stateless.onetime_encrypt(key, SECRET_MESSAGE)

            crypter.onetime_decrypt(key, buffer)
            assert bytes(buffer) == SECRET_MESSAGE

    @pytest.mark.parametrize(
        "stateful_class, stateless",
        [(StatefulAes128Ctr, Aes128Ctr), (StatefulAes256Ctr, Aes256Ctr)],
    )
    def test_ctr_many_keys(self, stateful_class: Type[StatefulCipher], stateless: type) -> None:
        """Один экземпляр, много пар ключ/IV."""
        with stateful_class() as crypter:
            for size in (0, 1, 15, 16, 17, 1000):
                key, iv = random_key_iv(crypter.spec)
                plaintext = os.urandom(size)
                buffer = bytearray(plaintext)

                crypter.encrypt(key, iv, buffer)
                assert bytes(buffer) == stateless.encrypt(key, iv, plaintext)

                crypter.decrypt(key, iv, buffer)
                assert bytes(buffer) == plaintext


# ==============================================================================
# INTERLEAVING
# ==============================================================================


class TestInterleaving:
    """Чередование encrypt/decrypt не портит состояние."""

    def test_interleaved_messages(self, ctr: StatefulAes128Ctr) -> None:
        key_a, iv_a = random_key_iv(ctr.spec)
        key_b, iv_b = random_key_iv(ctr.spec)

        first = bytearray(b"first message")
        second = bytearray(b"second message, longer")

        ctr.encrypt(key_a, iv_a, first)
        ctr.encrypt(key_b, iv_b, second)
        ctr.decrypt(key_a, iv_a, first)
        ctr.encrypt(key_a, iv_a, bytearray(b"noise in between"))
        ctr.decrypt(key_b, iv_b, second)

        assert first == b"first message"
        assert second == b"second message, longer"

    def test_same_key_reuses_key_schedule(self, ctr: StatefulAes128Ctr) -> None:
        key = os.urandom(16)

        for _ in range(4):
            ctr.encrypt(key, os.urandom(16), bytearray(b"data"))

        assert ctr.encryption_context.rekey_count == 1
        assert ctr.encryption_context.operation_count == 4

    def test_aead_interleaved(self, gcm: StatefulAes128Gcm) -> None:
        key, nonce = random_key_iv(gcm.spec)
        a = bytearray(b"alpha")
        b = bytearray(b"beta")

        gcm.encrypt(key, nonce, a)
        gcm.decrypt(key, nonce, a)
        gcm.encrypt(key, bytes(12), b)
        gcm.decrypt(key, bytes(12), b)

        assert (a, b) == (bytearray(b"alpha"), bytearray(b"beta"))


# ==============================================================================
# BUFFERS
# ==============================================================================


class TestBuffers:
    """Тесты in-place буферов."""

    def test_bytearray_identity_preserved(self, ctr: StatefulAes128Ctr) -> None:
        key, iv = random_key_iv(ctr.spec)
        buffer = bytearray(SECRET_MESSAGE)
        original_id = id(buffer)

        ctr.encrypt(key, iv, buffer)

        assert id(buffer) == original_id
        assert bytes(buffer) == Aes128Ctr.encrypt(key, iv, SECRET_MESSAGE)

    def test_bytearray_grows_for_tag(self, gcm: StatefulAes128Gcm) -> None:
        key, nonce = random_key_iv(gcm.spec)
        buffer = bytearray(SECRET_MESSAGE)

        gcm.encrypt(key, nonce, buffer)
        assert len(buffer) == len(SECRET_MESSAGE) + 16

        gcm.decrypt(key, nonce, buffer)
        assert buffer == SECRET_MESSAGE

    def test_bytearray_grows_and_shrinks_for_padding(self) -> None:
        key, iv = random_key_iv(StatefulAes128Cbc.spec)
        buffer = bytearray(SECRET_MESSAGE)

        with StatefulAes128Cbc() as crypter:
            crypter.encrypt(key, iv, buffer)
            assert len(buffer) == 32
            crypter.decrypt(key, iv, buffer)

        assert buffer == SECRET_MESSAGE

    def test_writable_memoryview_same_length(self, ctr: StatefulAes128Ctr) -> None:
        key, iv = random_key_iv(ctr.spec)
        backing = bytearray(b"prefix|" + SECRET_MESSAGE + b"|suffix")
        view = memoryview(backing)[7 : 7 + len(SECRET_MESSAGE)]

        ctr.encrypt(key, iv, view)

        assert backing[:7] == b"prefix|"
        assert backing[-7:] == b"|suffix"
        assert bytes(view) == Aes128Ctr.encrypt(key, iv, SECRET_MESSAGE)

    def test_memoryview_presized_for_tag(self, gcm: StatefulAes128Gcm) -> None:
        """Буфер фиксированного размера должен уже иметь длину результата."""
        key, nonce = random_key_iv(gcm.spec)
        ciphertext = bytearray(SECRET_MESSAGE)
        gcm.encrypt(key, nonce, ciphertext)

        view = memoryview(bytearray(ciphertext))
        with pytest.raises(InvalidBufferError):
            gcm.decrypt(key, nonce, view)

    def test_fixed_buffer_wrong_size_untouched(self, gcm: StatefulAes128Gcm) -> None:
        key, nonce = random_key_iv(gcm.spec)
        backing = bytearray(SECRET_MESSAGE)

        with pytest.raises(InvalidBufferError) as exc_info:
            gcm.encrypt(key, nonce, memoryview(backing))

        assert backing == SECRET_MESSAGE
        assert exc_info.value.context["output_size"] == len(SECRET_MESSAGE) + 16

    def test_exported_bytearray_cannot_grow(self, gcm: StatefulAes128Gcm) -> None:
        """Живой memoryview запрещает изменение размера bytearray."""
        key, nonce = random_key_iv(gcm.spec)
        buffer = bytearray(SECRET_MESSAGE)

        with memoryview(buffer):
            with pytest.raises(InvalidBufferError) as exc_info:
                gcm.encrypt(key, nonce, buffer)

        assert isinstance(exc_info.value.__cause__, BufferError)
        assert exc_info.value.context["buffer_size"] == len(SECRET_MESSAGE)
        assert buffer == SECRET_MESSAGE

        gcm.encrypt(key, nonce, buffer)
        assert len(buffer) == len(SECRET_MESSAGE) + 16

    def test_typed_array_buffer(self, ctr: StatefulAes128Ctr) -> None:
        """Любой writable buffer protocol объект нужной длины."""
        key, iv = random_key_iv(ctr.spec)
        buffer = array.array("I", [1, 2, 3, 4])
        raw = buffer.tobytes()

        ctr.encrypt(key, iv, buffer)
        assert buffer.tobytes() == Aes128Ctr.encrypt(key, iv, raw)

        ctr.decrypt(key, iv, buffer)
        assert buffer.tolist() == [1, 2, 3, 4]

    @pytest.mark.parametrize(
        "buffer",
        [b"immutable", memoryview(b"read-only view"), "text", 42],
        ids=["bytes", "readonly-memoryview", "str", "int"],
    )
    def test_invalid_buffers(self, ctr: StatefulAes128Ctr, buffer: object) -> None:
        key, iv = random_key_iv(ctr.spec)

        with pytest.raises(InvalidBufferError):
            ctr.encrypt(key, iv, buffer)  # type: ignore[arg-type]

    def test_bytearray_resizable_after_failure(self, gcm: StatefulAes128Gcm) -> None:
        """Неудачный вызов не удерживает export буфера."""
        key, nonce = random_key_iv(gcm.spec)
        buffer = bytearray(b"not a valid ciphertext with tag")

        with pytest.raises(AuthenticationError):
            gcm.decrypt(key, nonce, buffer)

        buffer.extend(b"!")
        assert buffer.endswith(b"!")


# ==============================================================================
# ERRORS
# ==============================================================================


class TestErrors:
    """Тесты ошибок stateful вызовов."""

    def test_wrong_key_leaves_buffer(self, ctr: StatefulAes128Ctr) -> None:
        buffer = bytearray(SECRET_MESSAGE)

        with pytest.raises(InvalidKeyError):
            ctr.encrypt(bytes(15), bytes(16), buffer)

        assert buffer == SECRET_MESSAGE

    def test_wrong_iv(self, ctr: StatefulAes128Ctr) -> None:
        with pytest.raises(InvalidIVError):
            ctr.decrypt(bytes(16), bytes(12), bytearray(b"data"))

    def test_tampered_aead_buffer_untouched(self, gcm: StatefulAes128Gcm) -> None:
        key, nonce = random_key_iv(gcm.spec)
        buffer = bytearray(SECRET_MESSAGE)
        gcm.encrypt(key, nonce, buffer)
        buffer[0] ^= 0x01
        tampered = bytes(buffer)

        with pytest.raises(AuthenticationError):
            gcm.decrypt(key, nonce, buffer)

        assert bytes(buffer) == tampered

    def test_usable_after_error(self, gcm: StatefulAes128Gcm) -> None:
        key, nonce = random_key_iv(gcm.spec)

        with pytest.raises(AuthenticationError):
            gcm.decrypt(key, nonce, bytearray(32))

        buffer = bytearray(b"recovered")
        gcm.encrypt(key, nonce, buffer)
        gcm.decrypt(key, nonce, buffer)
        assert buffer == b"recovered"


# ==============================================================================
# LIFECYCLE
# ==============================================================================


class TestLifecycle:
    """Тесты close() и context manager."""

    def test_close_releases_both_contexts(self) -> None:
        crypter = StatefulAes128Ctr()
        crypter.close()

        assert crypter.closed
        assert crypter.encryption_context.closed
        assert crypter.decryption_context.closed

    def test_close_idempotent(self) -> None:
        crypter = StatefulAes128Ctr()
        crypter.close()
        crypter.close()

        assert crypter.closed

    def test_use_after_close(self) -> None:
        crypter = StatefulAes128Ctr()
        crypter.close()

        with pytest.raises(ContextStateError, match="closed"):
            crypter.encrypt(bytes(16), bytes(16), bytearray(b"data"))

    def test_context_manager(self) -> None:
        with StatefulAes128Ctr() as crypter:
            assert not crypter.closed

        assert crypter.closed

    def test_repr(self, ctr: StatefulAes128Ctr) -> None:
        assert repr(ctr).startswith("StatefulAes128Ctr(encrypt=CipherContext(")
