"""Точка входа утилиты reclaimer."""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, Optional, TextIO

from reclaimer import __version__
from reclaimer.exceptions import ReclaimerError
from reclaimer.reclaim.executor import ReclaimReport, Runner, run_reclaim
from reclaimer.reclaim.steps import build_default_steps
from reclaimer.runtime.client import RUNTIME_ERRORS, probe_runtime
from reclaimer.settings.exceptions import SettingsError
from reclaimer.settings.registry import SettingsRegistry
from reclaimer.utils.logger import configure_logging
from reclaimer.utils.paths import CONFIG_DIR
from reclaimer.utils.system_metrics import DiskSnapshot, format_bytes, read_disk_snapshot

LOGGER = logging.getLogger(__name__)


def initialize_workdir(base_dir: Path) -> bool:
    """Создаёт рабочую структуру (~/.reclaimer, logs)."""

    try:
        base_dir.mkdir(parents=True, exist_ok=True)
        (base_dir / "logs").mkdir(exist_ok=True)
        return True
    except OSError:
        # логирование ещё не настроено, сообщать некуда
        return False


def initialize_settings(config_path: Path) -> SettingsRegistry:
    """Загружает config.json, при ошибке остаётся на значениях по умолчанию."""

    registry = SettingsRegistry(config_path=config_path)
    try:
        registry.load_from_disk()
    except SettingsError:
        LOGGER.warning("Using default settings, %s could not be applied", config_path)
        registry.reset_to_defaults()
    return registry


def setup_logging_from_settings(base_dir: Path, settings: SettingsRegistry) -> None:
    """Настраивает логирование в соответствии с группой logging."""

    logging_settings = settings.get_group("logging")
    if not logging_settings.get("enabled"):
        logging.disable(logging.CRITICAL)
        return

    logging.disable(logging.NOTSET)
    configure_logging(
        log_dir=base_dir / "logs",
        level_name=logging_settings.get("level", "INFO"),
        max_bytes=logging_settings.get("max_file_size_mb", 10) * 1024 * 1024,
        backup_count=logging_settings.get("max_archived_files", 5),
    )


def take_disk_snapshot(
    path: str, reader: Callable[[str], DiskSnapshot] = read_disk_snapshot
) -> Optional[DiskSnapshot]:
    """Снимает заполненность диска для лога, ошибки чтения не прерывают очистку."""

    try:
        snapshot = reader(path)
    except OSError as exc:
        LOGGER.warning("Could not read disk usage for %s: %s", path, exc)
        return None
    LOGGER.info("Disk usage %s", snapshot.describe())
    return snapshot


def log_summary(
    report: ReclaimReport,
    before: Optional[DiskSnapshot],
    after: Optional[DiskSnapshot],
) -> None:
    """Записывает в лог итог прогона: изменение свободного места и упавшие шаги."""

    if before and after:
        LOGGER.info("Free space changed by %s", format_bytes(after.free - before.free))
    if report.failed_steps:
        LOGGER.warning(
            "Reclaim finished with failed steps: %s (exit code %s)",
            ", ".join(report.failed_steps),
            report.exit_code,
        )
    else:
        LOGGER.info("Reclaim finished, exit code %s", report.exit_code)


def run_probe(probe: Callable[[], Optional[Dict[str, int]]]) -> Optional[Dict[str, int]]:
    """Вызывает проверку Docker daemon; любая ошибка только логируется."""

    try:
        return probe()
    except (ReclaimerError, *RUNTIME_ERRORS) as exc:
        LOGGER.warning("Runtime probe failed: %s", exc)
        return None


def run(
    base_dir: Path,
    *,
    stream: Optional[TextIO] = None,
    runner: Runner = subprocess.run,
    probe: Callable[[], Optional[Dict[str, int]]] = probe_runtime,
    disk_reader: Callable[[str], DiskSnapshot] = read_disk_snapshot,
) -> int:
    """Готовит окружение и выполняет все шаги очистки; возвращает код последнего шага."""

    workdir_ready = initialize_workdir(base_dir)
    if workdir_ready:
        configure_logging(base_dir / "logs")
    else:
        logging.disable(logging.CRITICAL)

    settings = initialize_settings(base_dir / "config.json")
    if workdir_ready:
        setup_logging_from_settings(base_dir, settings)

    LOGGER.info("Starting reclaimer version %s", __version__)
    reclaim_settings = settings.get_group("reclaim")
    disk_path = reclaim_settings.get("disk_usage_path")
    before = take_disk_snapshot(disk_path, disk_reader)
    if reclaim_settings.get("probe_runtime"):
        run_probe(probe)

    steps = build_default_steps(
        docker_binary=reclaim_settings.get("docker_binary"),
        df_binary=reclaim_settings.get("df_binary"),
    )
    timeout = reclaim_settings.get("timeout_seconds") or None
    report = run_reclaim(steps, stream=stream or sys.stdout, runner=runner, timeout=timeout)

    after = take_disk_snapshot(disk_path, disk_reader)
    log_summary(report, before, after)
    return report.exit_code


def main() -> int:
    """Основная точка входа консольной команды ``reclaimer``."""

    return run(CONFIG_DIR)


if __name__ == "__main__":
    sys.exit(main())
