"""
Метаданные (идентичность) вариантов шифров.

Определяет:
- CipherSpec — immutable dataclass с константами варианта
  (длины ключа, IV, блока, тега)
- Enums для категоризации (CipherFamily, CipherLibrary)
- Factory functions для создания спецификаций
- Validation правила

Example:
    >>> from crypter.core.metadata import create_block_mode_spec
    >>> spec = create_block_mode_spec("AES-128-CTR", mode="CTR", key_length=16)
    >>> spec.iv_length, spec.block_length
    (16, 1)
    >>> spec.output_length(31)
    31

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

__all__: list[str] = [
    "CipherFamily",
    "CipherLibrary",
    "CipherSpec",
    "create_block_mode_spec",
    "create_aead_spec",
    "AES_BLOCK_SIZE",
    "AEAD_TAG_SIZE",
]

AES_BLOCK_SIZE = 16
AEAD_TAG_SIZE = 16


# ==============================================================================
# ENUM: CIPHER FAMILY
# ==============================================================================


class CipherFamily(str, Enum):
    """
    Семейство шифра.

    Наследует str для корректной JSON сериализации.

    Example:
        >>> CipherFamily.AEAD.value
        'aead'
        >>> CipherFamily.AEAD.label()
        'Аутентифицированное шифрование'
    """

    BLOCK_MODE = "block_mode"
    AEAD = "aead"

    def label(self) -> str:
        """Человекочитаемое название семейства на русском."""
        labels = {
            CipherFamily.BLOCK_MODE: "Блочный режим",
            CipherFamily.AEAD: "Аутентифицированное шифрование",
        }
        return labels[self]

    @classmethod
    def from_str(cls, value: str) -> CipherFamily:
        """
        Парсинг из строки (case-insensitive).

        Raises:
            ValueError: Некорректное значение
        """
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(
                f"Неизвестное семейство шифра: {value}. "
                f"Допустимые значения: {[c.value for c in cls]}"
            ) from None


class CipherLibrary(str, Enum):
    """Библиотека, выполняющая криптографию для варианта."""

    CRYPTOGRAPHY = "cryptography"
    PYCRYPTODOME = "pycryptodome"


# ==============================================================================
# DATACLASS: CIPHER SPEC
# ==============================================================================


@dataclass(frozen=True)
class CipherSpec:
    """
    Идентичность варианта шифра.

    Одна строка декларативной таблицы вариантов. Все значения постоянны
    и доступны без создания адаптера.

    Attributes:
        name: Уникальное имя (например, "AES-128-CTR")
        family: Семейство (блочный режим или AEAD)
        library: Библиотека, выполняющая операцию
        mode: Имя режима/конструкции в библиотеке ("CTR", "GCM", ...)
        key_length: Длина ключа в байтах
        iv_length: Длина IV/nonce в байтах
        block_length: Гранулярность обработки (16 для CBC, 1 для потоковых)
        tag_length: Длина AEAD тега (0 для блочных режимов)
        padded: PKCS#7 padding на finalize (только CBC)
        min_data_length: Минимальная длина данных (XTS: один блок AES)
        nonce_misuse_resistant: Повтор nonce не катастрофичен (GCM-SIV)
        description: Краткое описание

    Example:
        >>> spec = CipherSpec(
        ...     name="AES-128-GCM",
        ...     family=CipherFamily.AEAD,
        ...     library=CipherLibrary.CRYPTOGRAPHY,
        ...     mode="GCM",
        ...     key_length=16,
        ...     iv_length=12,
        ...     block_length=1,
        ...     tag_length=16,
        ... )
        >>> spec.output_length(31)
        47
    """

    # Обязательные поля
    name: str
    family: CipherFamily
    library: CipherLibrary
    mode: str
    key_length: int
    iv_length: int
    block_length: int

    # Опциональные поля
    tag_length: int = 0
    padded: bool = False
    min_data_length: int = 0
    nonce_misuse_resistant: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        """
        Валидация спецификации после инициализации.

        Raises:
            ValueError: Некорректные значения полей
        """
        if not self.name or not self.name.strip():
            raise ValueError("name не может быть пустым")

        if not self.mode:
            raise ValueError(f"Шифр {self.name} требует mode")

        for size_attr in ("key_length", "iv_length", "block_length"):
            size_value = getattr(self, size_attr)
            if size_value <= 0:
                raise ValueError(f"{size_attr} должен быть > 0, получено {size_value}")

        if self.min_data_length < 0:
            raise ValueError("min_data_length не может быть отрицательным")

        if self.family == CipherFamily.AEAD and self.tag_length <= 0:
            raise ValueError(f"AEAD шифр {self.name} требует tag_length > 0")

        if self.family == CipherFamily.BLOCK_MODE and self.tag_length != 0:
            raise ValueError(f"Блочный режим {self.name} не может иметь tag")

        if self.padded and self.block_length == 1:
            raise ValueError(f"Потоковый режим {self.name} не использует padding")

    @property
    def is_aead(self) -> bool:
        return self.family == CipherFamily.AEAD

    @property
    def identifier(self) -> str:
        """Ключ поиска в реестре (lower-case имя)."""
        return self.name.lower()

    def zero_iv(self) -> bytes:
        """Нулевой IV длины iv_length (для onetime режима)."""
        return bytes(self.iv_length)

    def minimum_input_length(self, *, encrypt: bool = True) -> int:
        """
        Минимальная длина входа для операции.

        Для расшифровки AEAD проверку длины выполняет сама библиотека
        (слишком короткий ciphertext не проходит аутентификацию).
        """
        if self.is_aead and not encrypt:
            return 0
        return self.min_data_length

    def output_length(self, input_length: int, *, encrypt: bool = True) -> Optional[int]:
        """
        Ожидаемая длина результата для входа input_length байт.

        Args:
            input_length: Длина входных данных
            encrypt: True для шифрования, False для расшифровки

        Returns:
            Длина результата, либо None если она известна только после
            снятия padding (расшифровка CBC)

        Example:
            >>> aes_128_cbc.output_length(31)
            32
            >>> aes_128_gcm.output_length(47, encrypt=False)
            31
        """
        if input_length < 0:
            raise ValueError("input_length не может быть отрицательным")

        if self.is_aead:
            if encrypt:
                return input_length + self.tag_length
            return max(input_length - self.tag_length, 0)

        if self.padded:
            if not encrypt:
                return None
            return (input_length // self.block_length + 1) * self.block_length

        return input_length

    def to_dict(self) -> Dict[str, Any]:
        """
        Сериализация в словарь (для JSON/YAML).

        Example:
            >>> spec.to_dict()
            {'name': 'AES-128-CTR', 'family': 'block_mode', ...}
        """
        return {
            "name": self.name,
            "family": self.family.value,
            "library": self.library.value,
            "mode": self.mode,
            "key_length": self.key_length,
            "iv_length": self.iv_length,
            "block_length": self.block_length,
            "tag_length": self.tag_length,
            "padded": self.padded,
            "min_data_length": self.min_data_length,
            "nonce_misuse_resistant": self.nonce_misuse_resistant,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CipherSpec:
        """
        Десериализация из словаря (из to_dict()).

        Raises:
            ValueError: Некорректные данные
        """
        data = data.copy()
        data["family"] = CipherFamily.from_str(data["family"])
        data["library"] = CipherLibrary(data["library"])
        return cls(**data)


# ==============================================================================
# FACTORY FUNCTIONS
# ==============================================================================


def create_block_mode_spec(
    name: str,
    *,
    mode: str,
    key_length: int,
    iv_length: int = AES_BLOCK_SIZE,
    padded: bool = False,
    min_data_length: int = 0,
    library: CipherLibrary = CipherLibrary.CRYPTOGRAPHY,
    description: str = "",
) -> CipherSpec:
    """
    Factory для AES блочного режима.

    block_length выводится из padding: padded режимы (CBC) обрабатывают
    данные блоками AES, остальные (CTR, OFB, XTS) — побайтно.

    Example:
        >>> spec = create_block_mode_spec("AES-256-CBC", mode="CBC",
        ...                               key_length=32, padded=True)
        >>> spec.block_length
        16
    """
    return CipherSpec(
        name=name,
        family=CipherFamily.BLOCK_MODE,
        library=library,
        mode=mode,
        key_length=key_length,
        iv_length=iv_length,
        block_length=AES_BLOCK_SIZE if padded else 1,
        padded=padded,
        min_data_length=min_data_length,
        description=description,
    )


def create_aead_spec(
    name: str,
    *,
    mode: str,
    key_length: int,
    iv_length: int = 12,  # 96-bit nonce
    library: CipherLibrary = CipherLibrary.CRYPTOGRAPHY,
    nonce_misuse_resistant: bool = False,
    min_data_length: int = 0,
    description: str = "",
) -> CipherSpec:
    """
    Factory для AEAD конструкции.

    Example:
        >>> spec = create_aead_spec("XChaCha20-Poly1305", mode="XChaCha20-Poly1305",
        ...                         key_length=32, iv_length=24,
        ...                         library=CipherLibrary.PYCRYPTODOME)
        >>> spec.tag_length
        16
    """
    return CipherSpec(
        name=name,
        family=CipherFamily.AEAD,
        library=library,
        mode=mode,
        key_length=key_length,
        iv_length=iv_length,
        block_length=1,
        tag_length=AEAD_TAG_SIZE,
        nonce_misuse_resistant=nonce_misuse_resistant,
        min_data_length=min_data_length,
        description=description,
    )
