"""Снимки использования диска при помощи psutil."""

from __future__ import annotations

from dataclasses import dataclass

import psutil


@dataclass(slots=True)
class DiskSnapshot:
    """Состояние файловой системы в момент замера."""

    path: str
    total: int
    used: int
    free: int
    percent: float

    def describe(self) -> str:
        return (
            f"{self.path}: {self.percent:.1f}% used, "
            f"{format_bytes(self.free)} free of {format_bytes(self.total)}"
        )


def read_disk_snapshot(path: str = "/") -> DiskSnapshot:
    """Возвращает сведения о заполненности файловой системы, содержащей path."""

    usage = psutil.disk_usage(path)
    return DiskSnapshot(
        path=path,
        total=int(usage.total),
        used=int(usage.used),
        free=int(usage.free),
        percent=float(usage.percent),
    )


def format_bytes(value: float) -> str:
    """Форматирует байты в удобочитаемый вид."""

    units = ["B", "KB", "MB", "GB", "TB"]
    size = float(value)
    index = 0
    negative = size < 0
    size = abs(size)
    while size >= 1024 and index < len(units) - 1:
        size /= 1024.0
        index += 1
    sign = "-" if negative else ""
    return f"{sign}{size:.1f} {units[index]}"
