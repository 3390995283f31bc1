# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for crs.

This module defines dataclasses representing all configurable aspects of crs,
including environment variables, file resolution and staging, subprocess
execution, task selection, exit codes, and global defaults.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class EnvironmentVariables:
    """Environment variable names used by crs."""

    # Enables crs debug mode.
    debug_mode: str = "CRS_DEBUG"
    # Path to an explicit crs configuration file.
    config_file: str = "CRS_CONFIG"


@dataclass
class ResolverSettings:
    """Settings for FileResolver."""

    # Maximum number of attempts when generating a unique temporary output name.
    temp_name_attempts: int = 10
    # Upper bound (inclusive) of the random suffix appended to staged output files.
    temp_suffix_max: int = 32767


@dataclass
class RunnerSettings:
    """Settings for ProcessRunner."""

    # Encoding used for invoking commands and decoding their output.
    default_encoding: str = "UTF-8"
    # Shell used to interpret the constructed command lines.
    shell: str = "/bin/sh"


@dataclass
class ExecutorSettings:
    """Settings for Executor."""

    # Type of tasks that are executed if no filter is specified.
    default_filter: str = "encoding"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by crs.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes used for various errors."""

    # Returned when a task of the job fails.
    task_failed: int = 1
    # Default error code for failures of crs commands.
    default: int = 91
    # Returned when the job or the environment is unusable.
    fatal: int = 92
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 99


@dataclass
class Config:
    """Main configuration for crs."""

    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    resolver: ResolverSettings = field(default_factory=ResolverSettings)
    runner: RunnerSettings = field(default_factory=RunnerSettings)
    executor: ExecutorSettings = field(default_factory=ExecutorSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the crs binary.
    binary_name: str = "crs"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read crs config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path)
            if (env_path := os.getenv(EnvironmentVariables.config_file))
            else None,
            # 2. Current working directory (for development/override)
            Path.cwd() / "crs_config.toml",
            # 3. XDG config home (standard user config location)
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "crs"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses properly.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for crs.
CFG = Config.load()
