"""
gp_config -- single public entrypoint for department configuration.

Responsibility:
    Provides the one way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned
    ``DepartmentConfig``; they never read YAML themselves.

Failure modes:
    - ``FileNotFoundError`` -- the requested file does not exist.
    - ``ValueError`` -- malformed values.

Every successful ``get_active_config()`` call emits a ``GP_CONFIG_TRACE``
log entry with the config id, version and checksum.
"""

from __future__ import annotations

from pathlib import Path

from gp_config.loader import compute_checksum, load_department_config
from gp_config.schema import DepartmentConfig
from gp_kernel.logging_config import get_logger

_logger = get_logger("config")

# Packaged default configuration
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "department.yaml"


def get_active_config(path: Path | str | None = None) -> DepartmentConfig:
    """Load the department configuration (packaged default when ``path`` is None)."""
    config = load_department_config(Path(path) if path is not None else DEFAULT_CONFIG_PATH)
    _logger.info(
        "GP_CONFIG_TRACE",
        extra={
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
        },
    )
    return config


__all__ = [
    "DepartmentConfig",
    "DEFAULT_CONFIG_PATH",
    "compute_checksum",
    "get_active_config",
]
