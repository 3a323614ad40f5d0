"""Описание четырёх шагов очистки и их порядок."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

SYSTEM_PRUNE = "system-prune"
IMAGE_PRUNE = "image-prune"
VOLUME_PRUNE = "volume-prune"
DISK_USAGE = "disk-usage"

SYSTEM_PRUNE_ANNOUNCEMENT = (
    "Removing stopped containers, unused networks, dangling images and build cache"
)
IMAGE_PRUNE_ANNOUNCEMENT = "Removing Unused images"
VOLUME_PRUNE_ANNOUNCEMENT = "Removed unused volume"
DISK_USAGE_ANNOUNCEMENT = "Checking memory now"


@dataclass(frozen=True, slots=True)
class ReclaimStep:
    """Один внешний вызов вместе с объявлением, которое печатается перед ним."""

    name: str
    announcement: str
    command: Tuple[str, ...]
    show_output: bool = False  # вывод скрытых шагов уходит только в лог


def build_default_steps(docker_binary: str = "docker", df_binary: str = "df") -> List[ReclaimStep]:
    """Возвращает шаги в порядке исполнения: system, image, volume prune, затем df -h."""

    return [
        ReclaimStep(
            name=SYSTEM_PRUNE,
            announcement=SYSTEM_PRUNE_ANNOUNCEMENT,
            command=(docker_binary, "system", "prune", "-a", "-f"),
        ),
        ReclaimStep(
            name=IMAGE_PRUNE,
            announcement=IMAGE_PRUNE_ANNOUNCEMENT,
            command=(docker_binary, "image", "prune", "-a", "-f"),
        ),
        ReclaimStep(
            name=VOLUME_PRUNE,
            announcement=VOLUME_PRUNE_ANNOUNCEMENT,
            command=(docker_binary, "volume", "prune", "-a", "-f"),
        ),
        ReclaimStep(
            name=DISK_USAGE,
            announcement=DISK_USAGE_ANNOUNCEMENT,
            command=(df_binary, "-h"),
            show_output=True,
        ),
    ]
