"""
Unit-тесты для модуля exceptions.py.

Проверяет иерархию наследования, форматирование сообщений
и атрибуты специализированных исключений.

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

from typing import Type

import pytest

from crypter.core.exceptions import (
    AlgorithmNotAvailableError,
    AuthenticationError,
    BackendError,
    CipherNotFoundError,
    ContextStateError,
    CrypterError,
    DuplicateRegistrationError,
    InvalidBufferError,
    InvalidDataLengthError,
    InvalidIVError,
    InvalidKeyError,
    ParameterError,
    ProtocolMismatchError,
    RegistryError,
)


# ==============================================================================
# BASE EXCEPTION TESTS
# ==============================================================================


class TestCrypterError:
    """Тесты базового исключения CrypterError."""

    def test_basic_initialization(self) -> None:
        """Тест базовой инициализации."""
        error = CrypterError("Test error message")

        assert error.message == "Test error message"
        assert error.algorithm is None
        assert error.context == {}

    def test_str_with_algorithm_and_context(self) -> None:
        """__str__ включает имя шифра и контекст."""
        error = CrypterError(
            "Operation failed",
            algorithm="AES-256-GCM",
            context={"size": 32},
        )

        assert str(error) == "CrypterError: Operation failed [algorithm=AES-256-GCM] (size=32)"

    def test_str_minimal(self) -> None:
        assert str(CrypterError("boom")) == "CrypterError: boom"

    def test_repr(self) -> None:
        error = CrypterError("boom", algorithm="AES-128-CTR")

        assert repr(error) == (
            "CrypterError(message='boom', algorithm='AES-128-CTR', context={})"
        )

    def test_catchable_as_exception(self) -> None:
        with pytest.raises(Exception):
            raise CrypterError("boom")


# ==============================================================================
# HIERARCHY TESTS
# ==============================================================================


class TestHierarchy:
    """Тесты иерархии наследования."""

    @pytest.mark.parametrize(
        "exc_class, parent",
        [
            (ParameterError, CrypterError),
            (InvalidKeyError, ParameterError),
            (InvalidIVError, ParameterError),
            (InvalidDataLengthError, ParameterError),
            (InvalidBufferError, ParameterError),
            (AuthenticationError, CrypterError),
            (BackendError, CrypterError),
            (AlgorithmNotAvailableError, BackendError),
            (ContextStateError, CrypterError),
            (RegistryError, CrypterError),
            (CipherNotFoundError, RegistryError),
            (CipherNotFoundError, KeyError),
            (DuplicateRegistrationError, RegistryError),
            (ProtocolMismatchError, RegistryError),
        ],
    )
    def test_subclass(self, exc_class: Type[Exception], parent: Type[Exception]) -> None:
        """Каждое исключение наследует ожидаемого родителя."""
        assert issubclass(exc_class, parent)

    def test_authentication_is_not_parameter_error(self) -> None:
        """Ошибка аутентификации не путается с ошибкой параметров."""
        assert not issubclass(AuthenticationError, ParameterError)
        assert not issubclass(AuthenticationError, BackendError)


# ==============================================================================
# PARAMETER ERRORS
# ==============================================================================


class TestSizeErrors:
    """Тесты ошибок размера ключа и IV."""

    def test_invalid_key_error(self) -> None:
        error = InvalidKeyError("AES-256-GCM", 32, 9)

        assert error.expected_size == 32
        assert error.actual_size == 9
        assert error.algorithm == "AES-256-GCM"
        assert error.message == (
            "Invalid key size for AES-256-GCM: expected 32 bytes, got 9 bytes"
        )
        assert error.context == {"expected_size": 32, "actual_size": 9}

    def test_invalid_iv_error(self) -> None:
        error = InvalidIVError("AES-128-GCM", 12, 5)

        assert error.expected_size == 12
        assert error.actual_size == 5
        assert "Invalid IV size for AES-128-GCM" in str(error)

    def test_invalid_data_length_error(self) -> None:
        error = InvalidDataLengthError("AES-128-XTS", 16, 3)

        assert error.minimum_size == 16
        assert error.actual_size == 3
        assert "at least 16 bytes" in error.message

    def test_message_has_no_secret_material(self) -> None:
        """Сообщения содержат только размеры."""
        key = b"\xde\xad\xbe\xef" * 2
        error = InvalidKeyError("AES-128-CTR", 16, len(key))

        assert key.hex() not in str(error)
        assert repr(key) not in repr(error)


# ==============================================================================
# OPERATION ERRORS
# ==============================================================================


class TestOperationErrors:
    """Тесты ошибок операций."""

    def test_authentication_error(self) -> None:
        error = AuthenticationError("ChaCha20-Poly1305")

        assert error.algorithm == "ChaCha20-Poly1305"
        assert error.message == "Authentication tag verification failed"

    def test_algorithm_not_available(self) -> None:
        error = AlgorithmNotAvailableError(
            "AES-256-GCM-SIV",
            "OpenSSL too old",
            required_library="cryptography",
        )

        assert error.reason == "OpenSSL too old"
        assert error.required_library == "cryptography"
        assert error.context["required_library"] == "cryptography"
        assert "not available: OpenSSL too old" in error.message

    def test_algorithm_not_available_without_library(self) -> None:
        error = AlgorithmNotAvailableError("X", "missing")

        assert error.required_library is None
        assert "required_library" not in error.context


# ==============================================================================
# REGISTRY ERRORS
# ==============================================================================


class TestRegistryErrors:
    """Тесты ошибок реестра."""

    def test_cipher_not_found_lists_available(self) -> None:
        available = [f"C-{i}" for i in range(8)]
        error = CipherNotFoundError("DES", available)

        assert error.cipher_name == "DES"
        assert error.available == available
        assert "C-0, C-1, C-2, C-3, C-4" in error.message
        assert "(8 total)" in error.message

    def test_cipher_not_found_str_is_formatted(self) -> None:
        """KeyError не заменяет форматирование CrypterError."""
        error = CipherNotFoundError("DES")

        assert str(error) == "CipherNotFoundError: Cipher 'DES' not found in registry [algorithm=DES] (available_count=0)"

    def test_cipher_not_found_caught_as_key_error(self) -> None:
        with pytest.raises(KeyError):
            raise CipherNotFoundError("DES")

    def test_duplicate_registration(self) -> None:
        error = DuplicateRegistrationError("AES-128-CTR")

        assert error.cipher_name == "AES-128-CTR"
        assert "already registered" in error.message

    def test_protocol_mismatch(self) -> None:
        error = ProtocolMismatchError(
            "StatelessCipherProtocol", "Broken", algorithm="AES-128-CTR"
        )

        assert error.expected_protocol == "StatelessCipherProtocol"
        assert error.actual_type == "Broken"
        assert error.message == "Broken does not implement StatelessCipherProtocol"
