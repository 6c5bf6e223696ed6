"""
Configuration Loader (``gp_config.loader``).

Responsibility
--------------
Loads a department YAML file and parses it into a ``DepartmentConfig``.
Runtime callers go through ``gp_config.get_active_config()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  No dependency on kernel,
modules, or engines.

Invariants enforced
-------------------
* Missing keys fall back to the schema defaults.
* Malformed values raise ``ValueError`` naming the key.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from types import MappingProxyType
from typing import Any
from uuid import UUID

import yaml

from gp_config.schema import DEFAULT_EXPENSE_CATEGORIES, DepartmentConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_decimal(key: str, value: Any) -> Decimal:
    """Parse a YAML scalar as Decimal (floats go through ``str``)."""
    if isinstance(value, bool):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    try:
        number = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{key}: expected a number, got {value!r}") from exc
    if not number.is_finite():
        raise ValueError(f"{key}: expected a finite number, got {value!r}")
    return number


def _parse_ratio(key: str, value: Any) -> Decimal:
    ratio = parse_decimal(key, value)
    if ratio < 0 or ratio > 1:
        raise ValueError(f"{key}: ratio {ratio} is outside [0, 1]")
    return ratio


def parse_department_config(data: dict[str, Any]) -> DepartmentConfig:
    """
    Parse a ``DepartmentConfig`` from a dict.

    Raises:
        ValueError: if a value has the wrong shape or is out of range.
    """
    if not isinstance(data, dict):
        raise ValueError(f"config root must be a mapping, got {type(data).__name__}")

    hours_per_day = parse_decimal("hours_per_day", data.get("hours_per_day", 8))
    if hours_per_day <= 0:
        raise ValueError(f"hours_per_day: must be positive, got {hours_per_day}")

    default_ratio = data.get("default_salary_ratio")

    raw_ratios = data.get("salary_ratios") or {}
    if not isinstance(raw_ratios, dict):
        raise ValueError("salary_ratios: expected a mapping of project id to ratio")
    ratios: dict[UUID, Decimal] = {}
    for project_id, ratio in raw_ratios.items():
        try:
            pid = UUID(str(project_id))
        except ValueError as exc:
            raise ValueError(f"salary_ratios: {project_id!r} is not a UUID") from exc
        ratios[pid] = _parse_ratio(f"salary_ratios[{project_id}]", ratio)

    categories = data.get("expense_categories", list(DEFAULT_EXPENSE_CATEGORIES))
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise ValueError("expense_categories: expected a list of strings")
    if not categories:
        raise ValueError("expense_categories: must not be empty")

    return DepartmentConfig(
        config_id=str(data.get("config_id", "default")),
        version=int(data.get("version", 1)),
        hours_per_day=hours_per_day,
        employee_bonus_rate=_parse_ratio(
            "employee_bonus_rate", data.get("employee_bonus_rate", "0.10"),
        ),
        default_salary_ratio=(
            _parse_ratio("default_salary_ratio", default_ratio)
            if default_ratio is not None else None
        ),
        salary_ratios=MappingProxyType(ratios),
        healthy_margin_threshold=parse_decimal(
            "healthy_margin_threshold", data.get("healthy_margin_threshold", 30),
        ),
        expense_categories=tuple(categories),
        checksum=compute_checksum(data),
    )


def load_department_config(path: Path) -> DepartmentConfig:
    return parse_department_config(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
