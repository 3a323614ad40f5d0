"""Дефолтная схема конфигурации, используемая для начального config.json."""

from __future__ import annotations

from typing import Any, Dict

# DEFAULT_CONFIG служит шаблоном для начального config.json
DEFAULT_CONFIG: Dict[str, Any] = {
    "version": "1.0.0",
    "logging": {
        "enabled": True,
        "level": "INFO",
        "max_file_size_mb": 10,
        "max_archived_files": 5,
    },
    "reclaim": {
        "docker_binary": "docker",
        "df_binary": "df",
        "timeout_seconds": 0,
        "probe_runtime": True,
        "disk_usage_path": "/",
    },
}
