"""
Централизованные исключения пакета crypter.

Иерархия типизированных исключений для всех адаптеров шифров.
Обеспечивает единообразную обработку ошибок и безопасность
(NO раскрытия секретных данных).

Example:
    >>> from crypter.core.exceptions import CrypterError
    >>> try:
    ...     Aes128Gcm.decrypt(key, nonce, ciphertext)
    ... except CrypterError as e:
    ...     logger.error(f"Crypto failed: {e}")
    ...     print(f"Algorithm: {e.algorithm}")

Иерархия:
    CrypterError (базовое)
    ├── ParameterError
    │   ├── InvalidKeyError
    │   ├── InvalidIVError
    │   ├── InvalidDataLengthError
    │   └── InvalidBufferError
    ├── AuthenticationError
    ├── BackendError
    │   └── AlgorithmNotAvailableError
    ├── ContextStateError
    └── RegistryError
        ├── CipherNotFoundError
        ├── DuplicateRegistrationError
        └── ProtocolMismatchError

Security Note:
    Все исключения НЕ раскрывают:
    - Ключи или их части
    - Plaintext или ciphertext
    - Nonce/IV значения

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

__all__: list[str] = [
    # Base exception
    "CrypterError",
    # Parameter errors
    "ParameterError",
    "InvalidKeyError",
    "InvalidIVError",
    "InvalidDataLengthError",
    "InvalidBufferError",
    # Operation errors
    "AuthenticationError",
    "BackendError",
    "AlgorithmNotAvailableError",
    "ContextStateError",
    # Registry errors
    "RegistryError",
    "CipherNotFoundError",
    "DuplicateRegistrationError",
    "ProtocolMismatchError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class CrypterError(Exception):
    """
    Базовое исключение для всех ошибок crypter.

    Позволяет перехватывать любые ошибки адаптеров через один тип.

    Attributes:
        message: Человекочитаемое сообщение об ошибке
        algorithm: Имя шифра, вызвавшего ошибку (опционально)
        context: Дополнительный контекст для отладки (опционально)

    Security Note:
        Сообщения ошибок НЕ должны содержать ключи, IV или данные.
    """

    def __init__(
        self,
        message: str,
        *,
        algorithm: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Инициализация базового исключения.

        Args:
            message: Человекочитаемое описание ошибки
            algorithm: Имя шифра (например, "AES-256-GCM")
            context: Дополнительный контекст (без секретов!)
        """
        super().__init__(message)
        self.message = message
        self.algorithm = algorithm
        self.context = context or {}

    def __str__(self) -> str:
        """
        Строковое представление исключения.

        Example:
            >>> str(error)
            'BackendError: Operation failed [algorithm=AES-256-GCM]'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.algorithm:
            parts.append(f" [algorithm={self.algorithm}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        """Представление для отладки."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"algorithm={self.algorithm!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# PARAMETER ERRORS
# ==============================================================================


class ParameterError(CrypterError):
    """
    Некорректные параметры вызова.

    Raises когда:
    - Ключ или IV неверной длины
    - Буфер не может принять результат операции
    """

    pass


class _SizeMismatchError(ParameterError):
    """Общая база для ошибок несоответствия размера."""

    _what = "value"

    def __init__(
        self,
        algorithm: str,
        expected: int,
        actual: int,
    ) -> None:
        message = (
            f"Invalid {self._what} size for {algorithm}: "
            f"expected {expected} bytes, got {actual} bytes"
        )
        super().__init__(
            message,
            algorithm=algorithm,
            context={"expected_size": expected, "actual_size": actual},
        )
        self.expected_size = expected
        self.actual_size = actual


class InvalidKeyError(_SizeMismatchError):
    """
    Ключ неверной длины.

    Example:
        >>> Aes256Gcm.encrypt(b"short_key", nonce, plaintext)
        InvalidKeyError: Invalid key size for AES-256-GCM: expected 32 bytes, got 9 bytes
    """

    _what = "key"


class InvalidIVError(_SizeMismatchError):
    """
    IV/nonce неверной длины.

    Example:
        >>> Aes128Gcm.encrypt(key, b"short", plaintext)
        InvalidIVError: Invalid IV size for AES-128-GCM: expected 12 bytes, got 5 bytes
    """

    _what = "IV"


class InvalidDataLengthError(ParameterError):
    """
    Данные короче минимума, который принимает режим.

    Raises когда:
    - XTS получает меньше одного блока AES (16 байт)
    - AES-GCM-SIV получает пустой plaintext
    """

    def __init__(self, algorithm: str, minimum: int, actual: int) -> None:
        super().__init__(
            f"{algorithm} requires at least {minimum} bytes of input, got {actual}",
            algorithm=algorithm,
            context={"minimum_size": minimum, "actual_size": actual},
        )
        self.minimum_size = minimum
        self.actual_size = actual


class InvalidBufferError(ParameterError):
    """
    Буфер не подходит для in-place операции.

    Raises когда:
    - Буфер read-only (bytes вместо bytearray)
    - Буфер фиксированного размера, а длина результата отличается
      (padding для CBC, tag для AEAD)
    """

    pass


# ==============================================================================
# OPERATION ERRORS
# ==============================================================================


class AuthenticationError(CrypterError):
    """
    AEAD tag не прошёл проверку.

    Данные изменены, либо использован неверный ключ или nonce.

    Security Note:
        Сообщение НЕ раскрывает деталей. Сравнение тега выполняет
        библиотека в constant time.
    """

    def __init__(self, algorithm: str) -> None:
        super().__init__(
            "Authentication tag verification failed",
            algorithm=algorithm,
        )


class BackendError(CrypterError):
    """
    Любая другая ошибка криптографической библиотеки.

    Исходное исключение библиотеки доступно через __cause__.
    """

    pass


class AlgorithmNotAvailableError(BackendError):
    """
    Шифр недоступен в текущей сборке библиотеки.

    Attributes:
        reason: Причина отсутствия поддержки
        required_library: Требуемая библиотека (если применимо)

    Example:
        >>> binding_for(AES_256_GCM_SIV)
        AlgorithmNotAvailableError: Algorithm 'AES-256-GCM-SIV' not available: ...
    """

    def __init__(
        self,
        algorithm: str,
        reason: str,
        *,
        required_library: Optional[str] = None,
    ) -> None:
        message = f"Algorithm '{algorithm}' not available: {reason}"

        context: Dict[str, Any] = {"reason": reason}
        if required_library:
            context["required_library"] = required_library

        super().__init__(message, algorithm=algorithm, context=context)
        self.reason = reason
        self.required_library = required_library


class ContextStateError(CrypterError):
    """Использование контекста без привязки ключа/IV или после close()."""

    pass


# ==============================================================================
# REGISTRY ERRORS
# ==============================================================================


class RegistryError(CrypterError):
    """Базовая ошибка реестра шифров."""

    pass


class CipherNotFoundError(RegistryError, KeyError):
    """
    Шифр не найден в реестре.

    Наследует KeyError для совместимости с dict-подобным поиском.

    Attributes:
        cipher_name: Имя запрошенного шифра
        available: Список доступных шифров
    """

    def __init__(
        self,
        cipher_name: str,
        available: Optional[List[str]] = None,
    ) -> None:
        message = f"Cipher '{cipher_name}' not found in registry"

        if available:
            message += f". Available: {', '.join(available[:5])}"
            if len(available) > 5:
                message += f" ... ({len(available)} total)"

        super().__init__(
            message,
            algorithm=cipher_name,
            context={"available_count": len(available) if available else 0},
        )
        self.cipher_name = cipher_name
        self.available = available or []


class DuplicateRegistrationError(RegistryError):
    """Шифр с таким именем уже зарегистрирован."""

    def __init__(self, cipher_name: str) -> None:
        super().__init__(
            f"Cipher '{cipher_name}' is already registered",
            algorithm=cipher_name,
        )
        self.cipher_name = cipher_name


class ProtocolMismatchError(RegistryError):
    """
    Адаптер не реализует требуемый Protocol.

    Attributes:
        expected_protocol: Имя ожидаемого Protocol
        actual_type: Имя фактического типа
    """

    def __init__(
        self,
        expected_protocol: str,
        actual_type: str,
        *,
        algorithm: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"{actual_type} does not implement {expected_protocol}",
            algorithm=algorithm,
            context={
                "expected_protocol": expected_protocol,
                "actual_type": actual_type,
            },
        )
        self.expected_protocol = expected_protocol
        self.actual_type = actual_type
