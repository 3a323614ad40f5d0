"""Загрузка config.json в проверенные группы настроек."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Dict

from reclaimer.settings.exceptions import (
    SettingsIOError,
    SettingsNotFoundError,
    SettingsValidationError,
)
from reclaimer.settings.groups import LoggingSettings, ReclaimSettings, SettingsGroup
from reclaimer.settings.schemas import DEFAULT_CONFIG

LOGGER = logging.getLogger(__name__)


class SettingsRegistry:
    """Группы ``logging`` и ``reclaim`` одного прогона, привязанные к файлу конфигурации.

    Файл читается поверх DEFAULT_CONFIG, поэтому частичный config.json
    допустим. Ключи верхнего уровня, которых нет среди групп (``version``
    и пользовательские пометки), сохраняются при перезаписи файла.
    """

    def __init__(self, config_path: Path) -> None:
        self._file_path = config_path
        self._groups: Dict[str, SettingsGroup] = {
            group.group_name: group for group in (LoggingSettings(), ReclaimSettings())
        }
        self._extra: Dict[str, Any] = self._split_extra(DEFAULT_CONFIG)

    def get_group(self, name: str) -> SettingsGroup:
        try:
            return self._groups[name]
        except KeyError:
            raise SettingsNotFoundError(name) from None

    def load_from_disk(self) -> None:
        """Применяет config.json; если файла нет, записывает значения по умолчанию."""

        if not self._file_path.exists():
            LOGGER.info("Config file %s not found, writing defaults.", self._file_path)
            self.save_to_disk()
            return

        try:
            content = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise SettingsIOError(self._file_path, str(exc)) from exc
        if not isinstance(content, dict):
            raise SettingsIOError(self._file_path, "top-level JSON value must be an object")

        merged = copy.deepcopy(DEFAULT_CONFIG)
        for key, value in content.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(value)
            else:
                merged[key] = value

        self._extra = self._split_extra(merged)
        for name, group in self._groups.items():
            section = merged.get(name)
            if not isinstance(section, dict):
                raise SettingsValidationError(name, section, "section must be a JSON object")
            group.from_dict(section)

    def save_to_disk(self) -> None:
        payload = dict(self._extra)
        payload.update({name: group.to_dict() for name, group in self._groups.items()})
        try:
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text(
                json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
            )
        except OSError as exc:
            raise SettingsIOError(self._file_path, str(exc)) from exc

    def reset_to_defaults(self) -> None:
        for group in self._groups.values():
            group.reset_to_defaults()

    def _split_extra(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in data.items() if key not in self._groups}
