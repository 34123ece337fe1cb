"""
Протокольные интерфейсы адаптеров шифров.

Определяет два Protocol класса для двух режимов исполнения:
- StatelessCipherProtocol — одноразовые вызовы, контекст создаётся
  и уничтожается на каждый вызов
- StatefulCipherProtocol — долгоживущий объект с двумя контекстами
  (encrypt/decrypt), которые перепривязываются к новому ключу/IV

Модуль использует typing.Protocol для определения контрактов, что обеспечивает
structural subtyping без явного наследования. Все Protocol классы помечены
@runtime_checkable для поддержки isinstance() проверок (в том числе на самих
классах-адаптерах, т.к. методы интроспекции — classmethods).

Example:
    >>> from crypter.algorithms.ciphers import Aes128Ctr
    >>> isinstance(Aes128Ctr, StatelessCipherProtocol)
    True

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from crypter.core.metadata import CipherSpec

# In-place targets; a memoryview must be writable and already output-sized
WritableBuffer = Union[bytearray, memoryview]

__all__: list[str] = [
    "StatelessCipherProtocol",
    "StatefulCipherProtocol",
    "WritableBuffer",
]


# ==============================================================================
# STATELESS CIPHER PROTOCOL
# ==============================================================================


@runtime_checkable
class StatelessCipherProtocol(Protocol):
    """
    Протокол stateless адаптера.

    Каждый вызов независим: создаётся свежий контекст, обрабатывается
    весь буфер, выполняется finalize, контекст уничтожается.
    Безопасен для параллельного вызова из нескольких потоков.

    Validation Rules:
        - key: длина должна быть == key_length()
        - iv: длина должна быть == iv_length()

    Example:
        >>> Aes128Gcm.key_length(), Aes128Gcm.iv_length()
        (16, 12)
        >>> ct = Aes128Gcm.encrypt(key, nonce, b"data")
        >>> len(ct)
        20
        >>> Aes128Gcm.decrypt(key, nonce, ct)
        b'data'
    """

    spec: CipherSpec

    @classmethod
    def key_length(cls) -> int:
        """Длина ключа в байтах."""
        ...

    @classmethod
    def iv_length(cls) -> int:
        """Длина IV/nonce в байтах."""
        ...

    @classmethod
    def block_length(cls) -> int:
        """Размер блока обработки в байтах (1 для потоковых режимов)."""
        ...

    @classmethod
    def encrypt(cls, key: bytes, iv: bytes, data: bytes) -> bytes:
        """
        Зашифровать данные.

        Returns:
            Новый буфер с ciphertext. Для AEAD tag добавлен после ciphertext.

        Raises:
            InvalidKeyError: Некорректная длина ключа
            InvalidIVError: Некорректная длина IV
            BackendError: Ошибка библиотеки
        """
        ...

    @classmethod
    def decrypt(cls, key: bytes, iv: bytes, data: bytes) -> bytes:
        """
        Расшифровать данные.

        Raises:
            InvalidKeyError: Некорректная длина ключа
            InvalidIVError: Некорректная длина IV
            AuthenticationError: Tag не прошёл проверку (AEAD)
            BackendError: Ошибка библиотеки
        """
        ...

    @classmethod
    def onetime_encrypt(cls, key: bytes, data: bytes) -> bytes:
        """
        Зашифровать с нулевым IV.

        ВНИМАНИЕ: безопасно только если ключ используется для ОДНОГО вызова,
        либо шифр устойчив к повтору nonce (GCM-SIV).
        """
        ...

    @classmethod
    def onetime_decrypt(cls, key: bytes, data: bytes) -> bytes:
        """Расшифровать данные, зашифрованные onetime_encrypt()."""
        ...


# ==============================================================================
# STATEFUL CIPHER PROTOCOL
# ==============================================================================


@runtime_checkable
class StatefulCipherProtocol(Protocol):
    """
    Протокол stateful адаптера.

    Экземпляр владеет двумя контекстами (encrypt и decrypt), которые
    перепривязываются к новому ключу/IV на каждом вызове, но никогда
    не пересоздаются. Буфер вызывающего изменяется in-place.

    Thread Safety:
        НЕ потокобезопасен. Один экземпляр на поток, либо внешняя
        синхронизация.

    Example:
        >>> crypter = StatefulAes128Ctr()
        >>> buf = bytearray(b"block data")
        >>> crypter.encrypt(key, iv, buf)
        >>> crypter.decrypt(key, iv, buf)
        >>> bytes(buf)
        b'block data'
    """

    spec: CipherSpec

    @classmethod
    def key_length(cls) -> int:
        ...

    @classmethod
    def iv_length(cls) -> int:
        ...

    @classmethod
    def block_length(cls) -> int:
        ...

    def encrypt(self, key: bytes, iv: bytes, buffer: WritableBuffer) -> None:
        """Зашифровать буфер in-place через encryption context."""
        ...

    def decrypt(self, key: bytes, iv: bytes, buffer: WritableBuffer) -> None:
        """Расшифровать буфер in-place через decryption context."""
        ...

    def onetime_encrypt(self, key: bytes, buffer: WritableBuffer) -> None:
        ...

    def onetime_decrypt(self, key: bytes, buffer: WritableBuffer) -> None:
        ...

    def close(self) -> None:
        """Освободить оба контекста."""
        ...
