"""
Symmetric cipher adapters (14 variants generated from one table).

Every variant is one row of CIPHER_TABLE. For each row two adapter classes
are generated:

- a stateless adapter (``Aes128Ctr``): classmethods only, a fresh
  CipherContext is created and torn down on every call;
- a stateful adapter (``StatefulAes128Ctr``): owns one encryption and one
  decryption CipherContext, rebinds them to a new key/IV on every call and
  mutates the caller's buffer in place.

**Block modes (8 variants, cryptography):**
- AES-128-CBC, AES-256-CBC - PKCS#7 padded
- AES-128-CTR, AES-256-CTR
- AES-128-OFB, AES-256-OFB
- AES-128-XTS, AES-256-XTS - double-length key, input >= 16 bytes

**AEAD (6 variants):**
- AES-128-GCM, AES-256-GCM - 96-bit nonce
- AES-128-GCM-SIV, AES-256-GCM-SIV - nonce-misuse resistant
- ChaCha20-Poly1305 - 96-bit nonce
- XChaCha20-Poly1305 - 192-bit nonce (pycryptodome)

Adding a variant means adding one row to CIPHER_TABLE.

Onetime mode:
    ``onetime_encrypt`` / ``onetime_decrypt`` use an all-zero IV.
    ⚠️  Correctness precondition: each key is used for at most ONE onetime
    call, unless the cipher is nonce-misuse resistant (GCM-SIV). Reusing the
    zero IV under the same key breaks confidentiality for CTR, OFB, GCM and
    ChaCha20-Poly1305. Nothing here detects or prevents such reuse.

Example:
    >>> from crypter.algorithms.ciphers import Aes128Ctr, StatefulAes128Ctr
    >>> ct = Aes128Ctr.encrypt(key, iv, b"this is a super secret message")
    >>> crypter = StatefulAes128Ctr()
    >>> buf = bytearray(ct)
    >>> crypter.decrypt(key, iv, buf)
    >>> bytes(buf)
    b'this is a super secret message'

Thread Safety:
    Stateless adapters: safe from any number of threads.
    Stateful adapters: NOT safe for concurrent reuse; one instance per worker.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Tuple, Type

from crypter.algorithms.backends import binding_for
from crypter.core.context import CipherContext, Direction
from crypter.core.exceptions import (
    CipherNotFoundError,
    ContextStateError,
    InvalidBufferError,
)
from crypter.core.metadata import (
    CipherLibrary,
    CipherSpec,
    create_aead_spec,
    create_block_mode_spec,
)
from crypter.core.protocols import WritableBuffer

logger = logging.getLogger(__name__)

__all__ = [
    # Base classes
    "StatelessCipher",
    "StatefulCipher",
    # Generation
    "CIPHER_TABLE",
    "stateless_cipher",
    "stateful_cipher",
    "class_name_for",
    # Lookup
    "STATELESS_CIPHERS",
    "STATEFUL_CIPHERS",
    "get_cipher",
    "get_stateful_cipher",
]


# ==============================================================================
# CIPHER TABLE
# ==============================================================================

CIPHER_TABLE: Tuple[CipherSpec, ...] = (
    # --- AES block modes -----------------------------------------------------
    create_block_mode_spec(
        "AES-128-CBC",
        mode="CBC",
        key_length=16,
        padded=True,
        description="AES-128 in CBC mode with PKCS#7 padding",
    ),
    create_block_mode_spec(
        "AES-128-CTR",
        mode="CTR",
        key_length=16,
        description="AES-128 in counter mode (16-byte initial counter block)",
    ),
    create_block_mode_spec(
        "AES-128-XTS",
        mode="XTS",
        key_length=32,
        min_data_length=16,
        description="AES-128 in XTS mode (two 128-bit keys, 16-byte tweak)",
    ),
    create_block_mode_spec(
        "AES-128-OFB",
        mode="OFB",
        key_length=16,
        description="AES-128 in output feedback mode",
    ),
    create_block_mode_spec(
        "AES-256-CBC",
        mode="CBC",
        key_length=32,
        padded=True,
        description="AES-256 in CBC mode with PKCS#7 padding",
    ),
    create_block_mode_spec(
        "AES-256-CTR",
        mode="CTR",
        key_length=32,
        description="AES-256 in counter mode (16-byte initial counter block)",
    ),
    create_block_mode_spec(
        "AES-256-XTS",
        mode="XTS",
        key_length=64,
        min_data_length=16,
        description="AES-256 in XTS mode (two 256-bit keys, 16-byte tweak)",
    ),
    create_block_mode_spec(
        "AES-256-OFB",
        mode="OFB",
        key_length=32,
        description="AES-256 in output feedback mode",
    ),
    # --- AEAD ----------------------------------------------------------------
    create_aead_spec(
        "AES-128-GCM",
        mode="GCM",
        key_length=16,
        description="AES-128 Galois/Counter Mode, 96-bit nonce",
    ),
    create_aead_spec(
        "AES-256-GCM",
        mode="GCM",
        key_length=32,
        description="AES-256 Galois/Counter Mode, 96-bit nonce",
    ),
    create_aead_spec(
        "AES-128-GCM-SIV",
        mode="GCM-SIV",
        key_length=16,
        nonce_misuse_resistant=True,
        description="AES-128-GCM-SIV (RFC 8452), nonce-misuse resistant",
    ),
    create_aead_spec(
        "AES-256-GCM-SIV",
        mode="GCM-SIV",
        key_length=32,
        nonce_misuse_resistant=True,
        description="AES-256-GCM-SIV (RFC 8452), nonce-misuse resistant",
    ),
    create_aead_spec(
        "ChaCha20-Poly1305",
        mode="ChaCha20-Poly1305",
        key_length=32,
        description="ChaCha20-Poly1305 (RFC 8439), 96-bit nonce",
    ),
    create_aead_spec(
        "XChaCha20-Poly1305",
        mode="XChaCha20-Poly1305",
        key_length=32,
        iv_length=24,  # 192-bit nonce
        library=CipherLibrary.PYCRYPTODOME,
        description="XChaCha20-Poly1305, 192-bit extended nonce",
    ),
)


# ==============================================================================
# STATELESS ADAPTER
# ==============================================================================


class _LengthIntrospection:
    """Длины варианта, доступные без экземпляра."""

    spec: ClassVar[CipherSpec]

    @classmethod
    def key_length(cls) -> int:
        return cls.spec.key_length

    @classmethod
    def iv_length(cls) -> int:
        return cls.spec.iv_length

    @classmethod
    def block_length(cls) -> int:
        return cls.spec.block_length


class StatelessCipher(_LengthIntrospection):
    """
    Base of generated stateless adapters.

    All operations are classmethods: no instance is ever needed and no
    state survives a call.
    """

    @classmethod
    def _run(cls, direction: Direction, key: bytes, iv: bytes, data: bytes) -> bytes:
        with CipherContext(cls.spec, direction, binding_for(cls.spec)) as ctx:
            ctx.rebind(key, iv)
            return ctx.process(data)

    @classmethod
    def encrypt(cls, key: bytes, iv: bytes, data: bytes) -> bytes:
        """Зашифровать data; для AEAD tag добавляется в конец."""
        return cls._run(Direction.ENCRYPT, key, iv, data)

    @classmethod
    def decrypt(cls, key: bytes, iv: bytes, data: bytes) -> bytes:
        """Расшифровать data; для AEAD проверяется tag."""
        return cls._run(Direction.DECRYPT, key, iv, data)

    @classmethod
    def onetime_encrypt(cls, key: bytes, data: bytes) -> bytes:
        """
        Зашифровать с нулевым IV.

        ⚠️  Один вызов на ключ (кроме GCM-SIV). См. документацию модуля.
        """
        return cls.encrypt(key, cls.spec.zero_iv(), data)

    @classmethod
    def onetime_decrypt(cls, key: bytes, data: bytes) -> bytes:
        """Расшифровать данные, зашифрованные onetime_encrypt()."""
        return cls.decrypt(key, cls.spec.zero_iv(), data)


# ==============================================================================
# STATEFUL ADAPTER
# ==============================================================================


def _read_writable(buffer: Any, algorithm: str) -> bytes:
    """Снимок содержимого буфера; InvalidBufferError если он не writable."""
    try:
        view = memoryview(buffer)
    except TypeError:
        raise InvalidBufferError(
            f"Expected a writable buffer, got {type(buffer).__name__}",
            algorithm=algorithm,
        ) from None

    with view:
        if view.readonly:
            raise InvalidBufferError(
                f"Buffer of type {type(buffer).__name__} is read-only",
                algorithm=algorithm,
            )
        if not view.c_contiguous:
            raise InvalidBufferError(
                "Buffer must be C-contiguous", algorithm=algorithm
            )
        return view.tobytes()


def _write_back(buffer: Any, result: bytes, algorithm: str) -> None:
    """Записать результат в буфер вызывающего."""
    with memoryview(buffer) as view:
        size = view.nbytes
        if size == len(result):
            with view.cast("B") as flat:
                flat[:] = result
            return

    if isinstance(buffer, bytearray):
        try:
            buffer[:] = result
        except BufferError as e:
            raise InvalidBufferError(
                f"Output is {len(result)} bytes but the bytearray holds {size} "
                f"and cannot be resized while it is exported: {e}",
                algorithm=algorithm,
                context={"output_size": len(result), "buffer_size": size},
            ) from e
        return

    raise InvalidBufferError(
        f"Output is {len(result)} bytes but the buffer holds {size} "
        f"and cannot be resized; pass a bytearray",
        algorithm=algorithm,
        context={"output_size": len(result), "buffer_size": size},
    )


class StatefulCipher(_LengthIntrospection):
    """
    Base of generated stateful adapters.

    Owns two independent CipherContexts, one per direction. They are
    created once in __init__, rebound on every call and never swapped.

    Buffers:
        A bytearray is resized when the output length differs from the
        input (CBC padding, AEAD tag). Any other writable buffer must
        already have exactly the output length; otherwise
        InvalidBufferError is raised and the buffer is left untouched.
    """

    def __init__(self) -> None:
        binding = binding_for(self.spec)
        self._encryptor = CipherContext(self.spec, Direction.ENCRYPT, binding)
        self._decryptor = CipherContext(self.spec, Direction.DECRYPT, binding)
        logger.debug(f"{type(self).__name__}: contexts allocated")

    @property
    def encryption_context(self) -> CipherContext:
        return self._encryptor

    @property
    def decryption_context(self) -> CipherContext:
        return self._decryptor

    @property
    def closed(self) -> bool:
        return self._encryptor.closed and self._decryptor.closed

    def _run(
        self,
        ctx: CipherContext,
        key: bytes,
        iv: bytes,
        buffer: WritableBuffer,
    ) -> None:
        if ctx.closed:
            raise ContextStateError(
                f"{type(self).__name__} is closed", algorithm=self.spec.name
            )

        data = _read_writable(buffer, self.spec.name)

        ctx.rebind(key, iv)
        result = ctx.process(data)

        _write_back(buffer, result, self.spec.name)

    def encrypt(self, key: bytes, iv: bytes, buffer: WritableBuffer) -> None:
        """Зашифровать buffer in-place (encryption context)."""
        self._run(self._encryptor, key, iv, buffer)

    def decrypt(self, key: bytes, iv: bytes, buffer: WritableBuffer) -> None:
        """Расшифровать buffer in-place (decryption context)."""
        self._run(self._decryptor, key, iv, buffer)

    def onetime_encrypt(self, key: bytes, buffer: WritableBuffer) -> None:
        """
        Зашифровать in-place с нулевым IV.

        ⚠️  Один вызов на ключ (кроме GCM-SIV). См. документацию модуля.
        """
        self.encrypt(key, self.spec.zero_iv(), buffer)

    def onetime_decrypt(self, key: bytes, buffer: WritableBuffer) -> None:
        self.decrypt(key, self.spec.zero_iv(), buffer)

    def close(self) -> None:
        """Освободить оба контекста."""
        self._encryptor.close()
        self._decryptor.close()

    def __enter__(self) -> StatefulCipher:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(encrypt={self._encryptor!r}, decrypt={self._decryptor!r})"


# ==============================================================================
# GENERATION
# ==============================================================================


def class_name_for(spec: CipherSpec) -> str:
    """
    Имя класса адаптера из имени шифра.

    Example:
        >>> class_name_for(AES_128_GCM_SIV)
        'Aes128GcmSiv'
        >>> class_name_for(XCHACHA20_POLY1305)
        'XChaCha20Poly1305'
    """
    parts = []
    for part in spec.name.split("-"):
        # all-caps acronyms become CamelCase, mixed-case names stay as written
        parts.append(part.capitalize() if part.isupper() else part)
    return "".join(parts)


def stateless_cipher(spec: CipherSpec) -> Type[StatelessCipher]:
    """Сгенерировать stateless адаптер для строки таблицы."""
    return type(
        class_name_for(spec),
        (StatelessCipher,),
        {
            "spec": spec,
            "__module__": __name__,
            "__doc__": f"Stateless {spec.name} adapter. {spec.description}",
        },
    )


def stateful_cipher(spec: CipherSpec) -> Type[StatefulCipher]:
    """Сгенерировать stateful адаптер для строки таблицы."""
    return type(
        f"Stateful{class_name_for(spec)}",
        (StatefulCipher,),
        {
            "spec": spec,
            "__module__": __name__,
            "__doc__": f"Stateful {spec.name} adapter. {spec.description}",
        },
    )


STATELESS_CIPHERS: Dict[str, Type[StatelessCipher]] = {}
STATEFUL_CIPHERS: Dict[str, Type[StatefulCipher]] = {}

for _spec in CIPHER_TABLE:
    _stateless = stateless_cipher(_spec)
    _stateful = stateful_cipher(_spec)

    STATELESS_CIPHERS[_spec.identifier] = _stateless
    STATEFUL_CIPHERS[_spec.identifier] = _stateful

    globals()[_stateless.__name__] = _stateless
    globals()[_stateful.__name__] = _stateful
    __all__ += [_stateless.__name__, _stateful.__name__]

del _spec, _stateless, _stateful

_EXPECTED_VARIANT_COUNT = 14
assert len(STATELESS_CIPHERS) == _EXPECTED_VARIANT_COUNT, (
    f"Expected {_EXPECTED_VARIANT_COUNT} cipher variants, "
    f"got {len(STATELESS_CIPHERS)}"
)


# ==============================================================================
# LOOKUP HELPERS
# ==============================================================================


def get_cipher(name: str) -> Type[StatelessCipher]:
    """
    Получить stateless адаптер по имени (case-insensitive).

    Raises:
        CipherNotFoundError: Если шифр не найден

    Example:
        >>> get_cipher("aes-128-ctr") is Aes128Ctr
        True
    """
    try:
        return STATELESS_CIPHERS[name.lower()]
    except KeyError:
        raise CipherNotFoundError(name, sorted(STATELESS_CIPHERS)) from None


def get_stateful_cipher(name: str) -> StatefulCipher:
    """
    Создать новый stateful адаптер по имени (case-insensitive).

    Raises:
        CipherNotFoundError: Если шифр не найден
        AlgorithmNotAvailableError: Библиотека не поддерживает вариант
    """
    try:
        cipher_class = STATEFUL_CIPHERS[name.lower()]
    except KeyError:
        raise CipherNotFoundError(name, sorted(STATEFUL_CIPHERS)) from None
    return cipher_class()
