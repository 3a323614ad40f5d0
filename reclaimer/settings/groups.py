"""Классы групп настроек с валидацией значений."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from reclaimer.settings.exceptions import SettingsNotFoundError, SettingsValidationError
from reclaimer.settings.validators import (
    CompositeValidator,
    EnumValidator,
    NonEmptyStringValidator,
    RangeValidator,
    TypeValidator,
    Validator,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class SettingsGroup(ABC):
    """Абстрактная база для конкретных групп настроек."""

    group_name: str = ""

    def __init__(self) -> None:
        self._defaults: Dict[str, Any] = {}
        self._validators: Dict[str, Validator] = {}
        self._values: Dict[str, Any] = {}
        self._initialize_defaults()
        self._setup_validators()
        self.reset_to_defaults()

    @abstractmethod
    def _initialize_defaults(self) -> None:
        """Задаёт значения по умолчанию для группы."""

    @abstractmethod
    def _setup_validators(self) -> None:
        """Привязывает валидаторы к ключам группы."""

    def keys(self) -> Tuple[str, ...]:
        """Возвращает доступные ключи группы."""

        return tuple(self._defaults.keys())

    def get(self, key: str, default: Any = None) -> Any:
        """Возвращает значение настройки."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        return self._values.get(key, default)

    def validate(self, key: str, value: Any) -> Tuple[bool, str]:
        """Применяет соответствующий валидатор и возвращает результат."""

        validator = self._validators.get(key)
        if not validator:
            return True, ""
        return validator.validate(value)

    def set(self, key: str, value: Any) -> None:
        """Сохраняет значение, выбрасывая ошибку при невалидных данных."""

        if key not in self._defaults:
            raise SettingsNotFoundError(self.group_name, key)
        is_valid, error = self.validate(key, value)
        if not is_valid:
            raise SettingsValidationError(
                key=f"{self.group_name}.{key}",
                value=value,
                reason=error,
            )
        self._values[key] = value

    def to_dict(self) -> Dict[str, Any]:
        """Возвращает копию всех значений."""

        return dict(self._values)

    def from_dict(self, data: Dict[str, Any]) -> None:
        """Заполняет значениями из словаря (использует set для валидации)."""

        for key, value in data.items():
            if key in self._defaults:
                self.set(key, value)

    def reset_to_defaults(self) -> None:
        """Сбрасывает значения группы к дефолтным."""

        self._values = dict(self._defaults)


class LoggingSettings(SettingsGroup):
    """Настройки логирования в файл."""

    group_name = "logging"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "enabled": True,
            "level": "INFO",
            "max_file_size_mb": 10,
            "max_archived_files": 5,
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "enabled": TypeValidator(bool),
            "level": EnumValidator(LOG_LEVELS),
            "max_file_size_mb": CompositeValidator([TypeValidator(int), RangeValidator(1, 1000)]),
            "max_archived_files": CompositeValidator([TypeValidator(int), RangeValidator(1, 50)]),
        }


class ReclaimSettings(SettingsGroup):
    """Параметры запуска команд очистки."""

    group_name = "reclaim"

    def _initialize_defaults(self) -> None:
        self._defaults = {
            "docker_binary": "docker",
            "df_binary": "df",
            # 0 означает отсутствие таймаута
            "timeout_seconds": 0,
            "probe_runtime": True,
            "disk_usage_path": "/",
        }

    def _setup_validators(self) -> None:
        self._validators = {
            "docker_binary": NonEmptyStringValidator(),
            "df_binary": NonEmptyStringValidator(),
            "timeout_seconds": CompositeValidator([TypeValidator(int), RangeValidator(0, 86400)]),
            "probe_runtime": TypeValidator(bool),
            "disk_usage_path": NonEmptyStringValidator(),
        }
