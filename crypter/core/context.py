"""
Контекст шифра: однонаправленное переиспользуемое состояние.

CipherContext — единица жизненного цикла stateful адаптера:
- создаётся один раз и «заряжается» алгоритмом (без ключа/IV)
- перепривязывается к новому ключу/IV на каждом вызове (rebind)
- при неизменном ключе повторно использует keyed объект библиотеки
  (key schedule не пересчитывается)
- уничтожается через close() или выход из `with`

Контекст работает строго в одном направлении (ENCRYPT или DECRYPT).
Stateful адаптер владеет двумя независимыми контекстами, а не одним
контекстом с переключаемым режимом.

Thread Safety:
    НЕ потокобезопасен: rebind() и process() изменяют состояние.

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

import hmac
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from crypter.core.exceptions import (
    ContextStateError,
    InvalidDataLengthError,
    InvalidIVError,
    InvalidKeyError,
)
from crypter.core.metadata import CipherSpec

if TYPE_CHECKING:
    from crypter.algorithms.backends import CipherBinding

logger = logging.getLogger(__name__)

__all__: list[str] = [
    "Direction",
    "CipherContext",
]


class Direction(str, Enum):
    """Направление работы контекста."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"


class CipherContext:
    """
    Однонаправленный контекст шифра.

    Attributes:
        rekey_count: Сколько раз пересоздавался keyed объект библиотеки
        operation_count: Количество выполненных операций

    Example:
        >>> ctx = CipherContext(spec, Direction.ENCRYPT, binding_for(spec))
        >>> ctx.rebind(key, iv)
        >>> ciphertext = ctx.process(b"data")
        >>> ctx.is_bound  # IV consumed by the call
        False
        >>> ctx.close()
    """

    def __init__(
        self,
        spec: CipherSpec,
        direction: Direction,
        binding: CipherBinding,
    ) -> None:
        self._spec = spec
        self._direction = direction
        self._binding = binding

        self._key: Optional[bytes] = None
        self._key_object: Any = None
        self._iv: Optional[bytes] = None
        self._closed = False

        self.rekey_count = 0
        self.operation_count = 0

    @property
    def spec(self) -> CipherSpec:
        return self._spec

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def is_bound(self) -> bool:
        """Привязаны ли ключ и IV для следующей операции."""
        return self._iv is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def rebind(self, key: bytes, iv: bytes) -> None:
        """
        Привязать контекст к ключу и IV.

        Args:
            key: Ключ (длина == spec.key_length)
            iv: IV/nonce (длина == spec.iv_length)

        Raises:
            InvalidKeyError: Некорректная длина ключа
            InvalidIVError: Некорректная длина IV
            ContextStateError: Контекст закрыт
        """
        self._ensure_open()

        key = bytes(key)
        iv = bytes(iv)

        if len(key) != self._spec.key_length:
            raise InvalidKeyError(self._spec.name, self._spec.key_length, len(key))

        if len(iv) != self._spec.iv_length:
            raise InvalidIVError(self._spec.name, self._spec.iv_length, len(iv))

        if self._key is None or not hmac.compare_digest(key, self._key):
            self._key_object = self._binding.key_object(key)
            self._key = key
            self.rekey_count += 1

        self._iv = iv

    def process(self, data: bytes) -> bytes:
        """
        Выполнить полную операцию (update + finalize) над data.

        IV привязка расходуется вызовом: следующий process() требует
        нового rebind().

        Returns:
            Результат операции (новый буфер)

        Raises:
            ContextStateError: Нет привязки ключа/IV или контекст закрыт
            InvalidDataLengthError: Данные короче минимума режима
            AuthenticationError: Tag не прошёл проверку (AEAD decrypt)
            BackendError: Ошибка библиотеки
        """
        self._ensure_open()

        if self._iv is None:
            raise ContextStateError(
                f"{self._direction.value} context is not bound to a key/IV",
                algorithm=self._spec.name,
            )

        minimum = self._spec.minimum_input_length(
            encrypt=self._direction == Direction.ENCRYPT
        )
        if len(data) < minimum:
            raise InvalidDataLengthError(self._spec.name, minimum, len(data))

        iv, self._iv = self._iv, None

        result = self._binding.transform(self._key_object, iv, data, self._direction)
        self.operation_count += 1

        logger.debug(
            f"{self._spec.name}: {self._direction.value} {len(data)} -> {len(result)} bytes"
        )
        return result

    def close(self) -> None:
        """Сбросить ключевой материал. Повторный вызов безопасен."""
        self._key = None
        self._key_object = None
        self._iv = None
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise ContextStateError(
                f"{self._direction.value} context is closed",
                algorithm=self._spec.name,
            )

    def __enter__(self) -> CipherContext:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("bound" if self.is_bound else "idle")
        return (
            f"CipherContext({self._spec.name!r}, {self._direction.value}, {state})"
        )
