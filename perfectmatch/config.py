"""
Configuration loading and validation.

Solver settings live in an optional YAML file:

    solver:
      max_assignments: 1000000
      timeout_seconds: 30
      validate: true
    output:
      max_listed_solutions: 20
    logging:
      level: INFO

Every key is optional. Cancellation callables cannot come from a file and
are passed to the engine programmatically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .solver.limits import DEFAULT_MAX_ASSIGNMENTS, SearchLimits

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class SolverConfig:
    """
    Settings for one engine invocation.

    Attributes:
        max_assignments: Ceiling on live assignments (None = unbounded)
        timeout_seconds: Wall-clock budget for a solve (None = unbounded)
        validate: Run structural validation before solving
        max_listed_solutions: How many solutions the CLI prints
        log_level: Root log level used by the CLI
    """
    max_assignments: Optional[int] = DEFAULT_MAX_ASSIGNMENTS
    timeout_seconds: Optional[float] = None
    validate: bool = True
    max_listed_solutions: int = 20
    log_level: str = "WARNING"

    def search_limits(
        self,
        cancel_requested: Optional[Callable[[], bool]] = None,
    ) -> SearchLimits:
        """Search limits for this configuration."""
        return SearchLimits(
            max_assignments=self.max_assignments,
            timeout_seconds=self.timeout_seconds,
            cancel_requested=cancel_requested,
        )


def load_config(filepath: str) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary (empty for an empty file)

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration must be a mapping: {filepath}")
    return config


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate configuration and return list of issues.

    Args:
        config: Configuration dictionary

    Returns:
        List of issue messages (empty if valid)
    """
    issues = []

    known_sections = {"solver", "output", "logging"}
    for section in config:
        if section not in known_sections:
            issues.append(f"Unknown section: {section}")

    max_assignments = get_config_value(config, "solver.max_assignments")
    if max_assignments is not None:
        if not isinstance(max_assignments, int) or isinstance(max_assignments, bool) \
                or max_assignments < 1:
            issues.append(f"solver.max_assignments must be a positive integer, got {max_assignments!r}")

    timeout = get_config_value(config, "solver.timeout_seconds")
    if timeout is not None:
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            issues.append(f"solver.timeout_seconds must be positive, got {timeout!r}")

    validate = get_config_value(config, "solver.validate")
    if validate is not None and not isinstance(validate, bool):
        issues.append(f"solver.validate must be true or false, got {validate!r}")

    listed = get_config_value(config, "output.max_listed_solutions")
    if listed is not None:
        if not isinstance(listed, int) or isinstance(listed, bool) or listed < 0:
            issues.append(f"output.max_listed_solutions must be >= 0, got {listed!r}")

    level = get_config_value(config, "logging.level")
    if level is not None and str(level).upper() not in LOG_LEVELS:
        issues.append(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    return issues


def get_config_value(config: dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "solver.max_assignments")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    value = config
    for key in path.split("."):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value


def config_from_dict(config: dict[str, Any]) -> SolverConfig:
    """
    Build a SolverConfig from a configuration dictionary.

    Raises:
        ValueError: If the configuration has issues
    """
    issues = validate_config(config)
    if issues:
        raise ValueError("Invalid configuration: " + "; ".join(issues))

    defaults = SolverConfig()
    return SolverConfig(
        max_assignments=get_config_value(config, "solver.max_assignments", defaults.max_assignments),
        timeout_seconds=get_config_value(config, "solver.timeout_seconds", defaults.timeout_seconds),
        validate=get_config_value(config, "solver.validate", defaults.validate),
        max_listed_solutions=get_config_value(
            config, "output.max_listed_solutions", defaults.max_listed_solutions
        ),
        log_level=str(get_config_value(config, "logging.level", defaults.log_level)).upper(),
    )
