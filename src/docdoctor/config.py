"""Configuration management for the docdoctor CLI.

Handles configuration loading from multiple sources with precedence:
CLI args > environment variables > .docdoctorrc > pyproject.toml > defaults
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

# tomllib is only available in Python 3.11+
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class DoctorConfig:
    """Configuration for the docdoctor CLI.

    Attributes:
        checkers: Names of the checkers to run (default: all registered).
        extensions: File suffixes picked up when a directory is given
            (default: [".org"]).
        fail_fast: Abort a fix run on the first action that cannot be
            applied (default: False).
        isolate_checker_errors: Skip a failing checker instead of aborting
            the document (default: False).
        log_level: Logging level name (default: "WARNING").
    """

    checkers: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=lambda: [".org"])
    fail_fast: bool = False
    isolate_checker_errors: bool = False
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        """Normalize and validate configuration after initialization."""
        if isinstance(self.checkers, str):
            self.checkers = _split_list(self.checkers)
        if isinstance(self.extensions, str):
            self.extensions = _split_list(self.extensions)
        if isinstance(self.fail_fast, str):
            self.fail_fast = _parse_bool("fail_fast", self.fail_fast)
        if isinstance(self.isolate_checker_errors, str):
            self.isolate_checker_errors = _parse_bool(
                "isolate_checker_errors", self.isolate_checker_errors
            )
        if isinstance(self.log_level, str):
            self.log_level = self.log_level.upper()
        self._validate()

    def _validate(self) -> None:
        """Validate configuration values.

        Raises:
            ValueError: If any configuration value is invalid.
        """
        if not isinstance(self.checkers, list) or not all(
            isinstance(name, str) and name for name in self.checkers
        ):
            raise ValueError("checkers must be a list of non-empty strings")

        if not self.extensions or not isinstance(self.extensions, list):
            raise ValueError("extensions must be a non-empty list")
        for ext in self.extensions:
            if not isinstance(ext, str) or not ext.startswith("."):
                raise ValueError(f"extension must start with '.': {ext!r}")

        if not isinstance(self.fail_fast, bool):
            raise ValueError("fail_fast must be a boolean")
        if not isinstance(self.isolate_checker_errors, bool):
            raise ValueError("isolate_checker_errors must be a boolean")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _get_config_field_names() -> set[str]:
    """Get the set of valid configuration field names.

    Returns:
        Set of field names from DoctorConfig.
    """
    return {f.name for f in fields(DoctorConfig)}


def find_config_file(filename: str = ".docdoctorrc", start_dir: Path | None = None) -> Path | None:
    """Find a configuration file by traversing up the directory tree.

    Args:
        filename: Name of the config file to find.
        start_dir: Directory to start searching from. Defaults to current directory.

    Returns:
        Path to the config file if found, None otherwise.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        config_path = current / filename
        if config_path.is_file():
            return config_path

        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def _load_toml_file(path: Path) -> dict[str, Any]:
    """Load a TOML file and return its contents.

    Raises:
        OSError: If the file cannot be read.
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    with open(path, "rb") as f:
        result: dict[str, Any] = tomllib.load(f)
        return result


def _load_from_rcfile(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from the nearest .docdoctorrc file.

    Returns:
        Configuration from .docdoctorrc, or empty dict if not found or unreadable.
    """
    config_path = find_config_file(".docdoctorrc", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}

    valid_fields = _get_config_field_names()
    return {k: v for k, v in data.items() if k in valid_fields}


def _load_from_pyproject(start_dir: Path | None = None) -> dict[str, Any]:
    """Load configuration from pyproject.toml [tool.docdoctor] section.

    Returns:
        Configuration from pyproject.toml, or empty dict if not found.
    """
    config_path = find_config_file("pyproject.toml", start_dir)
    if config_path is None:
        return {}

    try:
        data = _load_toml_file(config_path)
    except (tomllib.TOMLDecodeError, OSError):
        return {}

    section = data.get("tool", {}).get("docdoctor", {})
    valid_fields = _get_config_field_names()
    return {k: v for k, v in section.items() if k in valid_fields}


def _load_from_env() -> dict[str, Any]:
    """Load configuration from environment variables.

    Variables are prefixed with DOCDOCTOR_ and use uppercase names, e.g.
    DOCDOCTOR_CHECKERS, DOCDOCTOR_FAIL_FAST. List values are comma-separated.

    Returns:
        Configuration from environment variables.
    """
    result: dict[str, Any] = {}
    for name in _get_config_field_names():
        value = os.environ.get(f"DOCDOCTOR_{name.upper()}")
        if value is not None:
            result[name] = value
    return result


def _merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge configuration dictionaries; later ones take precedence."""
    result: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            if value is not None:
                result[key] = value
    return result


def load_config(
    cli_overrides: dict[str, Any] | None = None,
    start_dir: Path | None = None,
) -> DoctorConfig:
    """Load configuration with full precedence chain.

    Precedence (highest to lowest):
    1. CLI arguments (cli_overrides)
    2. Environment variables (DOCDOCTOR_*)
    3. .docdoctorrc file
    4. pyproject.toml [tool.docdoctor] section
    5. Default values

    Args:
        cli_overrides: Configuration overrides from CLI arguments.
        start_dir: Directory to start searching for config files.

    Returns:
        Fully resolved DoctorConfig instance.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    valid_fields = _get_config_field_names()
    cli_config = {
        k: v for k, v in (cli_overrides or {}).items() if k in valid_fields and v is not None
    }

    merged = _merge_configs(
        _load_from_pyproject(start_dir),
        _load_from_rcfile(start_dir),
        _load_from_env(),
        cli_config,
    )

    return DoctorConfig(**merged)
