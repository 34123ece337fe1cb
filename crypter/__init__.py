"""
Единый интерфейс к симметричным шифрам: блочные режимы AES и AEAD конструкции.
Предназначение: одна точка импорта для stateless и stateful адаптеров, реестра и исключений.
EN: Uniform adapter layer over symmetric ciphers. Every variant exposes the same
length introspection (key, IV, block) and the same encrypt/decrypt/onetime calls,
both as one-shot classmethods and as reusable stateful objects.
"""

import logging

from .core.exceptions import (
    CrypterError,
    ParameterError,
    InvalidKeyError,
    InvalidIVError,
    InvalidDataLengthError,
    InvalidBufferError,
    AuthenticationError,
    BackendError,
    AlgorithmNotAvailableError,
    ContextStateError,
    RegistryError,
    CipherNotFoundError,
    DuplicateRegistrationError,
    ProtocolMismatchError,
)
from .core.metadata import CipherFamily, CipherLibrary, CipherSpec
from .core.protocols import StatefulCipherProtocol, StatelessCipherProtocol
from .core.context import CipherContext, Direction
from .algorithms.backends import is_available
from .algorithms.ciphers import (
    CIPHER_TABLE,
    STATEFUL_CIPHERS,
    STATELESS_CIPHERS,
    StatefulCipher,
    StatelessCipher,
    get_cipher,
    get_stateful_cipher,
)
from .config import CipherProfile, RegistryConfig
from .core.registry import CipherRegistry, register_all_ciphers

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Adapters
    "StatelessCipher",
    "StatefulCipher",
    "CIPHER_TABLE",
    "STATELESS_CIPHERS",
    "STATEFUL_CIPHERS",
    "get_cipher",
    "get_stateful_cipher",
    "is_available",
    # Identity and protocols
    "CipherSpec",
    "CipherFamily",
    "CipherLibrary",
    "StatelessCipherProtocol",
    "StatefulCipherProtocol",
    "CipherContext",
    "Direction",
    # Registry and configuration
    "CipherRegistry",
    "register_all_ciphers",
    "CipherProfile",
    "RegistryConfig",
    # Exceptions
    "CrypterError",
    "ParameterError",
    "InvalidKeyError",
    "InvalidIVError",
    "InvalidDataLengthError",
    "InvalidBufferError",
    "AuthenticationError",
    "BackendError",
    "AlgorithmNotAvailableError",
    "ContextStateError",
    "RegistryError",
    "CipherNotFoundError",
    "DuplicateRegistrationError",
    "ProtocolMismatchError",
]

__version__ = "1.0.0"
