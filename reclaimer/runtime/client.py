"""Обёртка над docker-py с безопасной инициализацией."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

import docker
from docker.errors import DockerException
from requests.exceptions import RequestException

from reclaimer.runtime.exceptions import DockerAPIError
from reclaimer.utils.system_metrics import format_bytes

LOGGER = logging.getLogger(__name__)

RECLAIMABLE_KEYS = ("containers", "images", "volumes", "build_cache")

# docker-py не оборачивает транспортные ошибки requests (ConnectionError, ReadTimeout)
RUNTIME_ERRORS = (DockerException, RequestException)


class DockerClientWrapper:
    """Управляет созданием и использованием docker API client."""

    def __init__(self, base_url: Optional[str] = None, raw_client: Any | None = None) -> None:
        self.base_url = base_url
        self._client = raw_client or self._create_client()

    def _create_client(self) -> Any:
        try:
            if self.base_url:
                return docker.DockerClient(base_url=self.base_url)
            return docker.from_env()
        except RUNTIME_ERRORS as exc:
            LOGGER.error("Docker client init error via %s: %s", self.base_url or "env", exc)
            raise DockerAPIError(str(exc), base_url=self.base_url) from exc

    def get_raw_client(self) -> Any:
        """Возвращает внутренний docker client."""

        return self._client

    def ping(self) -> bool:
        """Проверяет доступность Docker."""

        try:
            self._client.ping()
            return True
        except RUNTIME_ERRORS as exc:
            LOGGER.error("Docker ping failed: %s", exc)
            return False

    def reclaimable_space(self) -> Dict[str, int]:
        """Оценивает объём, который освободит очистка, по данным ``docker system df``.

        Учитываются остановленные контейнеры, образы без контейнеров,
        тома без ссылок и неиспользуемый кэш сборки.
        """

        try:
            df_data = self._client.api.df()
        except RUNTIME_ERRORS as exc:
            raise DockerAPIError(str(exc), base_url=self.base_url) from exc

        containers = sum(
            _size(item.get("SizeRw"))
            for item in df_data.get("Containers") or []
            if item.get("State") != "running"
        )
        images = sum(
            _size(item.get("Size"))
            for item in df_data.get("Images") or []
            if not item.get("Containers")
        )
        volumes = 0
        for item in df_data.get("Volumes") or []:
            usage = item.get("UsageData") or {}
            if usage.get("RefCount", 0) == 0:
                volumes += _size(usage.get("Size"))
        build_cache = sum(
            _size(item.get("Size"))
            for item in df_data.get("BuildCache") or []
            if not item.get("InUse")
        )
        return {
            "containers": containers,
            "images": images,
            "volumes": volumes,
            "build_cache": build_cache,
        }

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()


def _size(value: Any) -> int:
    # docker отдаёт -1, когда размер не вычислялся
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def probe_runtime(
    base_url: Optional[str] = None,
    *,
    client_factory: Callable[..., DockerClientWrapper] = DockerClientWrapper,
) -> Optional[Dict[str, int]]:
    """Проверяет Docker daemon и логирует оценку освобождаемого места.

    Никогда не прерывает работу: при недоступности daemon возвращает None.
    """

    try:
        client = client_factory(base_url)
    except DockerAPIError:
        LOGGER.warning("Docker runtime is unreachable, prune steps will likely fail")
        return None
    try:
        if not client.ping():
            LOGGER.warning("Docker runtime did not answer ping")
            return None
        estimate = client.reclaimable_space()
    except DockerAPIError:
        LOGGER.warning("Could not estimate reclaimable space")
        return None
    finally:
        client.close()

    LOGGER.info(
        "Reclaimable before prune: %s",
        ", ".join(f"{key}={format_bytes(estimate[key])}" for key in RECLAIMABLE_KEYS),
    )
    return estimate
