"""
Централизованный реестр вариантов шифров.

Thread-safe Singleton реестр всех адаптеров из CIPHER_TABLE.
Обеспечивает:
- Регистрацию пар адаптеров (stateless + stateful) с валидацией Protocol
- Фабричный метод для stateful адаптеров
- Thread-safe доступ (RLock)
- Query API для поиска шифров
- Статистику по реестру

Example:
    >>> from crypter.core.registry import CipherRegistry, register_all_ciphers
    >>> register_all_ciphers()
    >>> registry = CipherRegistry.get_instance()
    >>> cipher = registry.get_stateless("AES-256-GCM")
    >>> ciphertext = cipher.encrypt(key, nonce, b"data")

Thread Safety:
    Все публичные методы thread-safe благодаря RLock.
    Экземпляры из create_stateful() НЕ потокобезопасны (один на поток).

Version: 1.0
Date: October 19, 2026
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from crypter.config import CipherProfile, RegistryConfig
from crypter.core.exceptions import (
    CipherNotFoundError,
    CrypterError,
    DuplicateRegistrationError,
    ProtocolMismatchError,
)
from crypter.core.metadata import CipherFamily, CipherLibrary, CipherSpec
from crypter.core.protocols import StatefulCipherProtocol, StatelessCipherProtocol

logger = logging.getLogger(__name__)


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class RegistryEntry:
    """
    Запись реестра: спецификация и пара адаптеров.

    Attributes:
        spec: Спецификация варианта
        stateless: Класс stateless адаптера
        stateful: Фабрика stateful адаптера (обычно сам класс)
    """

    spec: CipherSpec
    stateless: Type[Any]
    stateful: Callable[[], Any]


@dataclass(frozen=True)
class RegistryStatistics:
    """
    Статистика зарегистрированных шифров.

    Attributes:
        total: Общее количество шифров
        by_family: Количество по семействам
        by_library: Количество по библиотекам
        aead_count: Количество AEAD
        misuse_resistant_count: Количество nonce-misuse resistant

    Example:
        >>> stats = registry.get_statistics()
        >>> stats.total
        14
        >>> stats.by_family[CipherFamily.AEAD]
        6
    """

    total: int
    by_family: Dict[CipherFamily, int]
    by_library: Dict[CipherLibrary, int]
    aead_count: int
    misuse_resistant_count: int

    def to_dict(self) -> Dict[str, Any]:
        """Сериализация в словарь."""
        return {
            "total": self.total,
            "by_family": {
                family.value: count for family, count in self.by_family.items()
            },
            "by_library": {
                library.value: count for library, count in self.by_library.items()
            },
            "aead_count": self.aead_count,
            "misuse_resistant_count": self.misuse_resistant_count,
        }


# ==============================================================================
# MAIN CLASS: CIPHER REGISTRY
# ==============================================================================


class CipherRegistry:
    """
    Thread-safe реестр вариантов шифров.

    Имена шифров нечувствительны к регистру: "aes-128-ctr" и
    "AES-128-CTR" указывают на одну запись.

    Attributes:
        _instance: Singleton instance
        _lock: RLock для thread-safety
        _registry: Словарь {identifier -> RegistryEntry}

    Example:
        >>> registry = CipherRegistry.get_instance()
        >>> registry.register(Aes128Ctr.spec, Aes128Ctr, StatefulAes128Ctr)
        >>> with registry.create_stateful("AES-128-CTR") as crypter:
        ...     crypter.encrypt(key, iv, buffer)
    """

    # Singleton instance (class-level)
    _instance: Optional[CipherRegistry] = None
    _lock: threading.RLock = threading.RLock()

    def __init__(self) -> None:
        """
        Приватный конструктор (используйте get_instance()).

        Raises:
            RuntimeError: Если попытка создать второй экземпляр
        """
        if CipherRegistry._instance is not None:
            raise RuntimeError(
                "CipherRegistry is a singleton. Use CipherRegistry.get_instance()"
            )

        self._registry: Dict[str, RegistryEntry] = {}

        logger.info("CipherRegistry initialized")

    @classmethod
    def get_instance(cls) -> CipherRegistry:
        """
        Получить singleton instance реестра.

        Thread Safety:
            Thread-safe double-checked locking

        Example:
            >>> CipherRegistry.get_instance() is CipherRegistry.get_instance()
            True
        """
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """
        Сбросить singleton (только для тестов).

        WARNING:
            Используйте только в unit-тестах!
        """
        with cls._lock:
            cls._instance = None
            logger.warning("CipherRegistry instance reset (testing only!)")

    def register(
        self,
        spec: CipherSpec,
        stateless: Type[Any],
        stateful: Callable[[], Any],
        *,
        validate: bool = True,
    ) -> None:
        """
        Зарегистрировать пару адаптеров.

        Args:
            spec: Спецификация варианта
            stateless: Класс stateless адаптера
            stateful: Фабрика stateful адаптера
            validate: Валидировать соответствие Protocol (по умолчанию True)

        Raises:
            DuplicateRegistrationError: Шифр уже зарегистрирован
            TypeError: spec не CipherSpec или stateful не callable
            ProtocolMismatchError: Адаптер не реализует Protocol (validate=True)
        """
        if not isinstance(spec, CipherSpec):
            raise TypeError(
                f"spec должна быть CipherSpec, получено {type(spec).__name__}"
            )

        if not callable(stateful):
            raise TypeError(
                f"stateful должна быть callable, получено {type(stateful).__name__}"
            )

        with self._lock:
            if spec.identifier in self._registry:
                raise DuplicateRegistrationError(spec.name)

            if validate:
                self._validate_protocol(spec, stateless, stateful)

            self._registry[spec.identifier] = RegistryEntry(
                spec=spec,
                stateless=stateless,
                stateful=stateful,
            )

            logger.info(
                f"Registered cipher: {spec.name} "
                f"(family={spec.family.value}, library={spec.library.value})"
            )

    def _validate_protocol(
        self,
        spec: CipherSpec,
        stateless: Type[Any],
        stateful: Callable[[], Any],
    ) -> None:
        """
        Валидация адаптеров через @runtime_checkable Protocol.

        Stateful фабрика вызывается один раз, тестовый экземпляр
        закрывается сразу после проверки.

        Raises:
            ProtocolMismatchError: Адаптер не соответствует Protocol
        """
        if not isinstance(stateless, StatelessCipherProtocol):
            raise ProtocolMismatchError(
                StatelessCipherProtocol.__name__,
                getattr(stateless, "__name__", type(stateless).__name__),
                algorithm=spec.name,
            )

        if stateless.spec != spec:
            raise ProtocolMismatchError(
                f"{StatelessCipherProtocol.__name__} for {spec.name}",
                f"{stateless.__name__} bound to {stateless.spec.name}",
                algorithm=spec.name,
            )

        try:
            instance = stateful()
        except Exception as e:
            raise ProtocolMismatchError(
                StatefulCipherProtocol.__name__,
                getattr(stateful, "__name__", type(stateful).__name__),
                algorithm=spec.name,
            ) from e

        try:
            if not isinstance(instance, StatefulCipherProtocol):
                raise ProtocolMismatchError(
                    StatefulCipherProtocol.__name__,
                    type(instance).__name__,
                    algorithm=spec.name,
                )
        finally:
            close = getattr(instance, "close", None)
            if callable(close):
                close()

        logger.debug(f"Protocol validation passed: {spec.name}")

    def _entry(self, name: str) -> RegistryEntry:
        with self._lock:
            try:
                return self._registry[name.lower()]
            except KeyError:
                raise CipherNotFoundError(
                    name, [e.spec.name for e in self._sorted_entries()]
                ) from None

    def _sorted_entries(self) -> List[RegistryEntry]:
        return [self._registry[key] for key in sorted(self._registry)]

    def get_stateless(self, name: str) -> Type[Any]:
        """
        Получить stateless адаптер по имени.

        Raises:
            CipherNotFoundError: Шифр не найден

        Example:
            >>> registry.get_stateless("aes-128-gcm").iv_length()
            12
        """
        return self._entry(name).stateless

    def create_stateful(self, name: str) -> Any:
        """
        Создать новый stateful адаптер по имени.

        Каждый вызов возвращает новый экземпляр со своими контекстами.

        Raises:
            CipherNotFoundError: Шифр не найден
            CrypterError: Ошибка адаптера (пробрасывается без изменений)
            RuntimeError: Не удалось создать экземпляр
        """
        entry = self._entry(name)

        try:
            instance = entry.stateful()
        except CrypterError as e:
            logger.error(f"Failed to create stateful {entry.spec.name}: {e}")
            raise
        except Exception as e:
            logger.error(
                f"Failed to create stateful {entry.spec.name}: {e}", exc_info=True
            )
            raise RuntimeError(
                f"Не удалось создать экземпляр {entry.spec.name}: {e}"
            ) from e

        logger.debug(f"Created stateful instance of {entry.spec.name}")
        return instance

    def get_spec(self, name: str) -> CipherSpec:
        """
        Получить спецификацию шифра.

        Raises:
            CipherNotFoundError: Шифр не найден
        """
        return self._entry(name).spec

    def list_ciphers(self) -> List[str]:
        """
        Список всех зарегистрированных шифров (sorted, каноничные имена).

        Example:
            >>> registry.list_ciphers()
            ['AES-128-CBC', 'AES-128-CTR', 'AES-128-GCM', ...]
        """
        with self._lock:
            return sorted(entry.spec.name for entry in self._registry.values())

    def list_by_family(self, family: CipherFamily) -> List[str]:
        """
        Список шифров семейства.

        Example:
            >>> registry.list_by_family(CipherFamily.AEAD)
            ['AES-128-GCM', 'AES-128-GCM-SIV', ...]
        """
        return self.search(family=family)

    def search(
        self,
        *,
        family: Optional[CipherFamily] = None,
        library: Optional[CipherLibrary] = None,
        is_aead: Optional[bool] = None,
        nonce_misuse_resistant: Optional[bool] = None,
    ) -> List[str]:
        """
        Поиск шифров по множественным критериям (AND логика).

        Args:
            family: Фильтр по семейству
            library: Фильтр по библиотеке
            is_aead: Только AEAD (True) или только блочные режимы (False)
            nonce_misuse_resistant: Фильтр по устойчивости к повтору nonce

        Returns:
            Отсортированный список имён

        Example:
            >>> registry.search(is_aead=True, nonce_misuse_resistant=True)
            ['AES-128-GCM-SIV', 'AES-256-GCM-SIV']
        """
        with self._lock:
            results = []

            for entry in self._registry.values():
                spec = entry.spec

                if family is not None and spec.family != family:
                    continue

                if library is not None and spec.library != library:
                    continue

                if is_aead is not None and spec.is_aead != is_aead:
                    continue

                if (
                    nonce_misuse_resistant is not None
                    and spec.nonce_misuse_resistant != nonce_misuse_resistant
                ):
                    continue

                results.append(spec.name)

            return sorted(results)

    def get_statistics(self) -> RegistryStatistics:
        """Получить статистику по зарегистрированным шифрам."""
        with self._lock:
            specs = [entry.spec for entry in self._registry.values()]

        return RegistryStatistics(
            total=len(specs),
            by_family=dict(Counter(spec.family for spec in specs)),
            by_library=dict(Counter(spec.library for spec in specs)),
            aead_count=sum(1 for spec in specs if spec.is_aead),
            misuse_resistant_count=sum(
                1 for spec in specs if spec.nonce_misuse_resistant
            ),
        )

    def is_registered(self, name: str) -> bool:
        """
        Проверка, зарегистрирован ли шифр.

        Example:
            >>> registry.is_registered("aes-256-ctr")
            True
            >>> registry.is_registered("DES")
            False
        """
        with self._lock:
            return name.lower() in self._registry

    def unregister(self, name: str) -> None:
        """
        Удалить шифр из реестра.

        Raises:
            CipherNotFoundError: Шифр не найден
        """
        with self._lock:
            entry = self._entry(name)
            del self._registry[entry.spec.identifier]
            logger.warning(f"Unregistered cipher: {entry.spec.name}")

    def __len__(self) -> int:
        with self._lock:
            return len(self._registry)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_registered(name)


# ==============================================================================
# REGISTRATION FUNCTION
# ==============================================================================


def register_all_ciphers(profile: CipherProfile = CipherProfile.ALL) -> List[str]:
    """
    Зарегистрировать все варианты из CIPHER_TABLE, подходящие профилю.

    Варианты, которые установленная библиотека не поддерживает
    (например, AES-GCM-SIV на старом OpenSSL), пропускаются с warning.
    Уже зарегистрированные варианты не регистрируются повторно.

    Args:
        profile: Профиль отбора шифров

    Returns:
        Имена шифров, зарегистрированных этим вызовом

    Example:
        >>> register_all_ciphers(CipherProfile.AEAD_ONLY)
        ['AES-128-GCM', 'AES-256-GCM', ...]

    Note:
        Использует lazy imports: модули алгоритмов импортируются только
        при вызове.
    """
    from crypter.algorithms.backends import is_available
    from crypter.algorithms.ciphers import (
        CIPHER_TABLE,
        STATEFUL_CIPHERS,
        STATELESS_CIPHERS,
    )

    config = RegistryConfig.from_profile(profile)
    registry = CipherRegistry.get_instance()

    logger.info(f"Starting cipher registration (profile={CipherProfile(profile).value})")

    registered: List[str] = []
    for spec in CIPHER_TABLE:
        if not config.accepts(spec):
            continue

        if registry.is_registered(spec.name):
            continue

        if not is_available(spec):
            logger.warning(f"Skipping {spec.name}: not supported by {spec.library.value}")
            continue

        registry.register(
            spec,
            STATELESS_CIPHERS[spec.identifier],
            STATEFUL_CIPHERS[spec.identifier],
        )
        registered.append(spec.name)

    logger.info(f"Registered {len(registered)} ciphers ({len(registry)} total)")
    return registered


# ==============================================================================
# MODULE EXPORTS
# ==============================================================================

__all__: list[str] = [
    # Main class
    "CipherRegistry",
    # Dataclasses
    "RegistryEntry",
    "RegistryStatistics",
    # Functions
    "register_all_ciphers",
]
