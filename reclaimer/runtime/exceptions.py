"""Исключения слоя работы с Docker API."""

from __future__ import annotations

from typing import Optional

from reclaimer.exceptions import ReclaimerError


class DockerAPIError(ReclaimerError):
    """Docker daemon недоступен или вернул ошибку."""

    def __init__(self, message: str, *, base_url: Optional[str] = None) -> None:
        super().__init__(message, context={"base_url": base_url or "env"})
