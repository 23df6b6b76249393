"""
Configuration management for dep-tree-diff.

Settings are read from defaults, then the first config file found in the
standard locations (JSON, YAML or TOML), then DEP_TREE_DIFF_* environment
variables.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import toml
import yaml
from rich.console import Console

from .error_handling import ErrorCategory, get_error_handler

console = Console(stderr=True)

KNOWN_REPORTERS = ("json", "markdown")


@dataclass
class DiffConfig:
    """Core diff run configuration."""

    fail_on_major: bool = False
    quiet: bool = False
    verbose: bool = False
    reporters: List[str] = field(default_factory=list)


@dataclass
class ReportingConfig:
    """Reporter output configuration."""

    json_output_file: str = "dep-tree-diff.json"
    markdown_output_file: str = "dep-tree-diff.md"
    show_summary: bool = True


@dataclass
class SecurityConfig:
    """Input validation limits."""

    max_file_size_mb: int = 50
    max_lines_per_file: int = 500000

    @property
    def max_file_size_bytes(self) -> int:
        """Convert MB to bytes for internal use."""
        return self.max_file_size_mb * 1024 * 1024


@dataclass
class LoggingConfig:
    """Logging and error handling configuration."""

    log_level: str = "ERROR"


@dataclass
class ComprehensiveConfig:
    """Main configuration containing all subsections."""

    diff: DiffConfig = field(default_factory=DiffConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# Global configuration instance
_global_config: Optional[ComprehensiveConfig] = None


def validate_config_values(config: ComprehensiveConfig) -> List[str]:
    """
    Validate configuration values and return any errors.

    Args:
        config: Configuration to validate

    Returns:
        List[str]: List of validation errors (empty if valid)
    """
    errors = []

    unknown = [name for name in config.diff.reporters if name not in KNOWN_REPORTERS]
    if unknown:
        errors.append(
            f"diff.reporters contains unknown reporters: {', '.join(unknown)} "
            f"(known: {', '.join(KNOWN_REPORTERS)})"
        )

    if not config.reporting.json_output_file:
        errors.append("reporting.json_output_file must not be empty")
    if not config.reporting.markdown_output_file:
        errors.append("reporting.markdown_output_file must not be empty")

    if config.security.max_file_size_mb <= 0:
        errors.append("security.max_file_size_mb must be positive")
    if config.security.max_lines_per_file <= 0:
        errors.append("security.max_lines_per_file must be positive")

    if config.logging.log_level.upper() not in (
        "DEBUG",
        "INFO",
        "WARNING",
        "ERROR",
        "CRITICAL",
    ):
        errors.append(f"logging.log_level is not a valid level: {config.logging.log_level}")

    return errors


def load_config_file(config_path: Path) -> Optional[Dict[str, Any]]:
    """Load config from a JSON, YAML or TOML file."""
    if not config_path.exists():
        return None

    suffix = config_path.suffix.lower()
    try:
        with open(config_path, encoding="utf-8") as f:
            if suffix in [".yaml", ".yml"]:
                return yaml.safe_load(f)
            elif suffix == ".toml":
                return toml.load(f)
            elif suffix == ".json":
                return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        get_error_handler().warning(
            ErrorCategory.CONFIGURATION,
            f"Error loading config from {config_path}: {e}",
            "cli_config",
            "load_config_file",
            exception=e,
        )
        console.print(
            f"⚠️  Error loading config from {config_path}: {e}", style="yellow"
        )

    return None


def find_config_file() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / ".dep-tree-diff.json",
        Path.cwd() / ".dep-tree-diff.yaml",
        Path.cwd() / ".dep-tree-diff.yml",
        Path.cwd() / ".dep-tree-diff.toml",
        Path.home() / ".config" / "dep-tree-diff" / "config.json",
        Path.home() / ".config" / "dep-tree-diff" / "config.yaml",
        Path.home() / ".config" / "dep-tree-diff" / "config.toml",
    ]

    for location in locations:
        if location.exists():
            return location

    return None


def load_environment_overrides(config: ComprehensiveConfig) -> None:
    """Load environment variable overrides."""

    def get_env_bool(key: str, default: bool = False) -> bool:
        value = os.environ.get(key, "").lower()
        return value in ["true", "1", "yes", "on"] if value else default

    def get_env_int(key: str, default: Optional[int] = None) -> Optional[int]:
        try:
            return int(os.environ[key]) if key in os.environ else default
        except ValueError:
            console.print(f"⚠️  Invalid integer value for {key}, using default", style="yellow")
            return default

    config.diff.fail_on_major = get_env_bool(
        "DEP_TREE_DIFF_FAIL_ON_MAJOR", config.diff.fail_on_major
    )
    config.diff.quiet = get_env_bool("DEP_TREE_DIFF_QUIET", config.diff.quiet)

    if reporters := os.environ.get("DEP_TREE_DIFF_REPORTERS"):
        config.diff.reporters = [r.strip() for r in reporters.split(",") if r.strip()]

    if json_output := os.environ.get("DEP_TREE_DIFF_JSON_OUTPUT"):
        config.reporting.json_output_file = json_output
    if markdown_output := os.environ.get("DEP_TREE_DIFF_MARKDOWN_OUTPUT"):
        config.reporting.markdown_output_file = markdown_output

    if max_file_size := get_env_int("DEP_TREE_DIFF_MAX_FILE_SIZE_MB"):
        config.security.max_file_size_mb = max_file_size
    if max_lines := get_env_int("DEP_TREE_DIFF_MAX_LINES_PER_FILE"):
        config.security.max_lines_per_file = max_lines

    if log_level := os.environ.get("DEP_TREE_DIFF_LOG_LEVEL"):
        config.logging.log_level = log_level.upper()


def apply_config_section(
    config: Any, section_data: Dict[str, Any], section_name: str
) -> None:
    """Apply configuration from dictionary to config section."""
    for key, value in section_data.items():
        if hasattr(config, key):
            setattr(config, key, value)
        else:
            console.print(
                f"⚠️  Unknown config key in {section_name}: {key}", style="yellow"
            )


def apply_config_data(config: ComprehensiveConfig, file_config: Dict[str, Any]) -> None:
    """Apply every known section of a loaded config file."""
    for section_name in ("diff", "reporting", "security", "logging"):
        if section_name in file_config:
            apply_config_section(
                getattr(config, section_name), file_config[section_name], section_name
            )


def load_config() -> ComprehensiveConfig:
    """Load comprehensive configuration from file and environment."""
    global _global_config

    if _global_config is not None:
        return _global_config

    config = ComprehensiveConfig()

    config_file = find_config_file()
    if config_file:
        file_config = load_config_file(config_file)
        if file_config:
            apply_config_data(config, file_config)

    load_environment_overrides(config)

    validation_errors = validate_config_values(config)
    if validation_errors:
        console.print("⚠️  Configuration validation errors:", style="red")
        for error in validation_errors:
            console.print(f"  • {error}", style="red")
        console.print("Using default values for invalid settings.", style="yellow")
        _restore_invalid_defaults(config)

    _global_config = config
    return config


def _restore_invalid_defaults(config: ComprehensiveConfig) -> None:
    defaults = ComprehensiveConfig()
    config.diff.reporters = [r for r in config.diff.reporters if r in KNOWN_REPORTERS]
    if not config.reporting.json_output_file:
        config.reporting.json_output_file = defaults.reporting.json_output_file
    if not config.reporting.markdown_output_file:
        config.reporting.markdown_output_file = defaults.reporting.markdown_output_file
    if config.security.max_file_size_mb <= 0:
        config.security.max_file_size_mb = defaults.security.max_file_size_mb
    if config.security.max_lines_per_file <= 0:
        config.security.max_lines_per_file = defaults.security.max_lines_per_file
    if config.logging.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        config.logging.log_level = defaults.logging.log_level


def get_config() -> ComprehensiveConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _global_config
    _global_config = None


def create_sample_config() -> str:
    """Generate sample configuration."""
    sample_config = {
        "diff": {
            "fail_on_major": False,
            "quiet": False,
            "verbose": False,
            "reporters": [],
        },
        "reporting": {
            "json_output_file": "dep-tree-diff.json",
            "markdown_output_file": "dep-tree-diff.md",
            "show_summary": True,
        },
        "security": {
            "max_file_size_mb": 50,
            "max_lines_per_file": 500000,
        },
        "logging": {
            "log_level": "ERROR"
        },
    }

    return json.dumps(sample_config, indent=2)
