"""
Library bindings for cipher variants.

A binding is the glue between a CipherSpec and the library that performs
the actual cryptography. It exposes exactly two operations:

- key_object(key): build the keyed library object (key schedule)
- transform(key_object, iv, data, direction): one full update + finalize

**Bindings (3):**
- BlockModeBinding - cryptography Cipher/algorithms.AES/modes (CBC, CTR, OFB, XTS)
- AeadBinding - cryptography AEAD classes (AES-GCM, AES-GCM-SIV, ChaCha20-Poly1305)
- XChaChaBinding - pycryptodome ChaCha20_Poly1305 with a 192-bit nonce

Error translation:
    - cryptography InvalidTag / pycryptodome MAC check -> AuthenticationError
    - anything else raised by the library -> BackendError (chained)

Bindings hold no per-call state and are shared between contexts.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Dict, Type

# Cryptography library (OpenSSL bindings)
from cryptography.exceptions import InvalidTag, UnsupportedAlgorithm
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import (
    AESGCM,
    ChaCha20Poly1305 as ChaCha20Poly1305Impl,
)

# Pycryptodome (XChaCha20-Poly1305)
from Crypto.Cipher import ChaCha20_Poly1305 as XChaCha20Impl

from crypter.core.context import Direction
from crypter.core.exceptions import (
    AlgorithmNotAvailableError,
    AuthenticationError,
    BackendError,
)
from crypter.core.metadata import AES_BLOCK_SIZE, CipherLibrary, CipherSpec

# AES-GCM-SIV requires cryptography >= 42.0
try:
    from cryptography.hazmat.primitives.ciphers.aead import AESGCMSIV

    HAS_GCMSIV = True
except ImportError:
    HAS_GCMSIV = False

# OFB lives under hazmat.decrepit in recent cryptography releases
try:
    from cryptography.hazmat.decrepit.ciphers.modes import OFB
except ImportError:
    OFB = modes.OFB

logger = logging.getLogger(__name__)

__all__ = [
    "CipherBinding",
    "BlockModeBinding",
    "AeadBinding",
    "XChaChaBinding",
    "binding_for",
    "is_available",
    "HAS_GCMSIV",
]


# ==============================================================================
# BASE BINDING
# ==============================================================================


class CipherBinding:
    """Base class of all bindings."""

    def __init__(self, spec: CipherSpec) -> None:
        self.spec = spec

    def key_object(self, key: bytes) -> Any:
        raise NotImplementedError

    def transform(
        self,
        key_object: Any,
        iv: bytes,
        data: bytes,
        direction: Direction,
    ) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.spec.name!r})"


# ==============================================================================
# BLOCK MODES (cryptography)
# ==============================================================================


_BLOCK_MODES: Dict[str, Callable[[bytes], modes.Mode]] = {
    "CBC": modes.CBC,
    "CTR": modes.CTR,
    "OFB": OFB,
    "XTS": modes.XTS,
}


class BlockModeBinding(CipherBinding):
    """
    AES block mode via cryptography.hazmat Cipher contexts.

    Padded modes (CBC) apply PKCS#7 on encrypt and strip it on decrypt,
    the way OpenSSL's EVP finalize does by default.
    """

    def __init__(self, spec: CipherSpec) -> None:
        super().__init__(spec)
        self._mode = _BLOCK_MODES[spec.mode]

    def key_object(self, key: bytes) -> Any:
        try:
            return algorithms.AES(key)
        except Exception as e:
            raise BackendError(
                f"{self.spec.name} key setup failed", algorithm=self.spec.name
            ) from e

    def transform(
        self,
        key_object: Any,
        iv: bytes,
        data: bytes,
        direction: Direction,
    ) -> bytes:
        try:
            cipher = Cipher(key_object, self._mode(iv))

            if direction == Direction.ENCRYPT:
                if self.spec.padded:
                    padder = padding.PKCS7(AES_BLOCK_SIZE * 8).padder()
                    data = padder.update(data) + padder.finalize()
                encryptor = cipher.encryptor()
                return encryptor.update(data) + encryptor.finalize()

            decryptor = cipher.decryptor()
            plaintext = decryptor.update(data) + decryptor.finalize()
            if self.spec.padded:
                unpadder = padding.PKCS7(AES_BLOCK_SIZE * 8).unpadder()
                plaintext = unpadder.update(plaintext) + unpadder.finalize()
            return plaintext
        except Exception as e:
            raise BackendError(
                f"{self.spec.name} {direction.value} failed", algorithm=self.spec.name
            ) from e


# ==============================================================================
# AEAD (cryptography)
# ==============================================================================


_AEAD_CLASSES: Dict[str, Type[Any]] = {
    "GCM": AESGCM,
    "ChaCha20-Poly1305": ChaCha20Poly1305Impl,
}
if HAS_GCMSIV:
    _AEAD_CLASSES["GCM-SIV"] = AESGCMSIV


class AeadBinding(CipherBinding):
    """
    AEAD construction via cryptography.hazmat aead classes.

    The keyed AEAD object is the key schedule: contexts keep it across
    calls while the key stays the same. Tag is appended after ciphertext.
    """

    def __init__(self, spec: CipherSpec) -> None:
        super().__init__(spec)
        self._aead_class = _AEAD_CLASSES[spec.mode]

    def key_object(self, key: bytes) -> Any:
        try:
            return self._aead_class(key)
        except Exception as e:
            raise BackendError(
                f"{self.spec.name} key setup failed", algorithm=self.spec.name
            ) from e

    def transform(
        self,
        key_object: Any,
        iv: bytes,
        data: bytes,
        direction: Direction,
    ) -> bytes:
        try:
            if direction == Direction.ENCRYPT:
                return key_object.encrypt(iv, bytes(data), None)
            return key_object.decrypt(iv, bytes(data), None)
        except InvalidTag:
            raise AuthenticationError(self.spec.name) from None
        except Exception as e:
            raise BackendError(
                f"{self.spec.name} {direction.value} failed", algorithm=self.spec.name
            ) from e


# ==============================================================================
# XCHACHA20-POLY1305 (pycryptodome)
# ==============================================================================


class XChaChaBinding(CipherBinding):
    """
    XChaCha20-Poly1305 via pycryptodome.

    pycryptodome cipher objects are single-use, so the key object is the
    raw key and a new cipher is created per call.
    """

    def key_object(self, key: bytes) -> Any:
        return key

    def transform(
        self,
        key_object: Any,
        iv: bytes,
        data: bytes,
        direction: Direction,
    ) -> bytes:
        tag_length = self.spec.tag_length

        if direction == Direction.DECRYPT and len(data) < tag_length:
            raise AuthenticationError(self.spec.name)

        try:
            cipher = XChaCha20Impl.new(key=key_object, nonce=iv)

            if direction == Direction.ENCRYPT:
                ciphertext, tag = cipher.encrypt_and_digest(bytes(data))
                return ciphertext + tag

            data = bytes(data)
            ct, tag = data[:-tag_length], data[-tag_length:]
            return cipher.decrypt_and_verify(ct, tag)
        except ValueError as e:
            if direction == Direction.DECRYPT and "MAC check failed" in str(e):
                raise AuthenticationError(self.spec.name) from None
            raise BackendError(
                f"{self.spec.name} {direction.value} failed", algorithm=self.spec.name
            ) from e
        except Exception as e:
            raise BackendError(
                f"{self.spec.name} {direction.value} failed", algorithm=self.spec.name
            ) from e


# ==============================================================================
# RESOLUTION
# ==============================================================================


@functools.lru_cache(maxsize=None)
def _gcmsiv_supported() -> bool:
    """AESGCMSIV is importable but the linked OpenSSL may still lack it."""
    if not HAS_GCMSIV:
        return False
    try:
        AESGCMSIV(bytes(16))
    except UnsupportedAlgorithm:
        return False
    return True


def is_available(spec: CipherSpec) -> bool:
    """
    Проверить, может ли установленная библиотека выполнить вариант.

    Example:
        >>> is_available(AES_128_CTR)
        True
    """
    if spec.library == CipherLibrary.PYCRYPTODOME:
        return spec.mode == "XChaCha20-Poly1305"

    if spec.mode == "GCM-SIV":
        return _gcmsiv_supported()

    if spec.is_aead:
        return spec.mode in _AEAD_CLASSES
    return spec.mode in _BLOCK_MODES


@functools.lru_cache(maxsize=None)
def binding_for(spec: CipherSpec) -> CipherBinding:
    """
    Получить binding для варианта.

    Bindings кэшируются: один объект на спецификацию.

    Raises:
        AlgorithmNotAvailableError: Библиотека не поддерживает вариант
    """
    if not is_available(spec):
        if spec.mode == "GCM-SIV":
            raise AlgorithmNotAvailableError(
                spec.name,
                "AES-GCM-SIV requires cryptography >= 42.0.0 built against OpenSSL >= 3.2",
                required_library="cryptography",
            )
        raise AlgorithmNotAvailableError(
            spec.name,
            f"mode '{spec.mode}' is not provided by {spec.library.value}",
            required_library=spec.library.value,
        )

    if spec.library == CipherLibrary.PYCRYPTODOME:
        binding: CipherBinding = XChaChaBinding(spec)
    elif spec.is_aead:
        binding = AeadBinding(spec)
    else:
        binding = BlockModeBinding(spec)

    logger.debug(f"Resolved binding {binding!r}")
    return binding
