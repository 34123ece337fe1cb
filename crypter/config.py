# -*- coding: utf-8 -*-
"""
RU: Конфигурация реестра шифров с готовыми профилями.
EN: Cipher registry configuration with predefined profiles.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, FrozenSet

from crypter.core.metadata import CipherFamily, CipherLibrary, CipherSpec


class CipherProfile(str, Enum):
    """Predefined selections of cipher variants for the registry."""

    # Every variant the installed libraries support (default)
    ALL = "all"

    # Authenticated encryption only
    AEAD_ONLY = "aead_only"

    # Constructions that tolerate nonce reuse (GCM-SIV)
    MISUSE_RESISTANT = "misuse_resistant"

    # AES block modes and AES AEAD (no ChaCha family)
    AES_ONLY = "aes_only"


@dataclass(frozen=True)
class RegistryConfig:
    """
    Registry population filter.

    Attributes:
        families: Cipher families admitted into the registry.
        libraries: Libraries allowed to back a variant.
        nonce_misuse_resistant_only: Admit only misuse-resistant AEAD.
        name_prefix: Admit only variants whose name starts with it.

    Examples:
        >>> config = RegistryConfig.from_profile(CipherProfile.AEAD_ONLY)
        >>> config.accepts(get_cipher("AES-128-CTR").spec)
        False

        >>> config = RegistryConfig(families=frozenset({CipherFamily.BLOCK_MODE}))
        >>> config.accepts(get_cipher("AES-256-CBC").spec)
        True
    """

    families: FrozenSet[CipherFamily] = frozenset(CipherFamily)
    libraries: FrozenSet[CipherLibrary] = frozenset(CipherLibrary)
    nonce_misuse_resistant_only: bool = False
    name_prefix: str = ""

    def __post_init__(self) -> None:
        """Validate parameters."""
        if not self.families:
            raise ValueError("families must not be empty")
        if not self.libraries:
            raise ValueError("libraries must not be empty")
        if self.nonce_misuse_resistant_only and CipherFamily.AEAD not in self.families:
            raise ValueError("nonce_misuse_resistant_only requires the AEAD family")

    @staticmethod
    def from_profile(profile: CipherProfile) -> "RegistryConfig":
        """
        Create configuration from predefined profile.

        Args:
            profile: Cipher selection profile.

        Returns:
            RegistryConfig instance.

        Examples:
            >>> cfg = RegistryConfig.from_profile(CipherProfile.MISUSE_RESISTANT)
            >>> cfg.nonce_misuse_resistant_only
            True
        """
        return _PROFILE_PARAMS[CipherProfile(profile)]

    def accepts(self, spec: CipherSpec) -> bool:
        """Check whether a variant passes this filter."""
        if spec.family not in self.families:
            return False
        if spec.library not in self.libraries:
            return False
        if self.nonce_misuse_resistant_only and not spec.nonce_misuse_resistant:
            return False
        if not spec.name.upper().startswith(self.name_prefix.upper()):
            return False
        return True


# Predefined profiles
_PROFILE_PARAMS: Final[dict[CipherProfile, RegistryConfig]] = {
    CipherProfile.ALL: RegistryConfig(),
    CipherProfile.AEAD_ONLY: RegistryConfig(
        families=frozenset({CipherFamily.AEAD}),
    ),
    CipherProfile.MISUSE_RESISTANT: RegistryConfig(
        families=frozenset({CipherFamily.AEAD}),
        nonce_misuse_resistant_only=True,
    ),
    CipherProfile.AES_ONLY: RegistryConfig(
        libraries=frozenset({CipherLibrary.CRYPTOGRAPHY}),
        name_prefix="AES-",
    ),
}


__all__ = [
    "CipherProfile",
    "RegistryConfig",
]
