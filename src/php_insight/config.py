"""Configuration loading and management for PHP Insight.

Configuration sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.php-insight.toml)
    3. Project config (php-insight.toml in the project root)
    4. Explicit config file (--config)
    5. Environment variables (PHP_INSIGHT_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workers=4)
    >>> config.workers
    4
    >>> config.duplicate_window
    5
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import InvalidConfigError, InvalidPathError

ENV_PREFIX = "PHP_INSIGHT_"
CONFIG_FILENAME = "php-insight.toml"

Verbosity = Literal["quiet", "normal", "verbose"]


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for a single analysis run.

    Attributes:
        File discovery:
            source_globs: Globs (relative to the project root) for application code
            test_globs: Globs for test code
            exclude_patterns: fnmatch patterns of relative paths to skip
            max_file_size_mb: Files larger than this are not read

        Performance tuning:
            workers: Parallel extraction workers (None or 1 = serial)

        Heuristics:
            duplicate_window: Lines per duplicate-detection window
            long_line_limit: Lines longer than this are a code smell
            magic_number_digits: Minimum digits for a bare integer to be "magic"
            complex_method_threshold: Methods above this complexity are flagged
            large_class_lines: Classes above this many lines are flagged
            large_class_methods: Classes above this many methods are flagged
            max_nesting: Method bodies nested deeper than this are flagged
            max_parameters: Signatures with more parameters than this are flagged

        Output control:
            detail_limit: Findings shown per category in detailed console output
            recommendation_limit: Recommendations shown in console output
            verbosity: Logging verbosity level
    """

    # File discovery
    source_globs: list[str] = field(default_factory=lambda: ["app/**/*.php"])
    test_globs: list[str] = field(default_factory=lambda: ["tests/**/*.php"])
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            "vendor/*",
            "node_modules/*",
            "storage/*",
            "bootstrap/cache/*",
            ".git/*",
            "*.blade.php",
        ]
    )
    max_file_size_mb: float = 5.0

    # Performance tuning
    workers: Optional[int] = None

    # Heuristics
    duplicate_window: int = 5
    long_line_limit: int = 120
    magic_number_digits: int = 3
    complex_method_threshold: int = 10
    large_class_lines: int = 200
    large_class_methods: int = 20
    max_nesting: int = 4
    max_parameters: int = 5

    # Output control
    detail_limit: int = 5
    recommendation_limit: int = 10
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.source_globs:
            raise ValueError("source_globs must contain at least one pattern")
        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")

        if self.workers is not None and self.workers < 1:
            raise ValueError("workers must be at least 1")

        if self.duplicate_window < 2:
            raise ValueError("duplicate_window must be at least 2")
        if self.magic_number_digits < 1:
            raise ValueError("magic_number_digits must be at least 1")

        positive_fields = [
            "long_line_limit",
            "complex_method_threshold",
            "large_class_lines",
            "large_class_methods",
            "max_nesting",
            "max_parameters",
            "detail_limit",
            "recommendation_limit",
        ]
        for field_name in positive_fields:
            if getattr(self, field_name) < 1:
                raise ValueError(f"{field_name} must be at least 1")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of: quiet, normal, verbose")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    @property
    def parallel(self) -> bool:
        return self.workers is not None and self.workers > 1


def load_config(
    config_file: Optional[Path] = None, project_root: Optional[Path] = None, **overrides
) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        project_root: Directory searched for php-insight.toml (default: cwd)
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        InvalidPathError: If an explicit config file does not exist
        InvalidConfigError: If any source holds an unknown key or invalid value
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config))

    project_config = Path(project_root or Path.cwd()) / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config))

    if config_file is not None:
        if not config_file.exists():
            raise InvalidPathError(config_file, "config file not found")
        merged.update(_load_toml_file(config_file))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(merged) - set(AnalysisConfig.__dataclass_fields__))
    if unknown:
        raise InvalidConfigError(unknown[0], merged[unknown[0]], "unknown configuration key")

    try:
        return AnalysisConfig(**merged)
    except ValueError as e:
        raise InvalidConfigError("config", merged, str(e))


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from PHP_INSIGHT_* environment variables.

    Scalar fields only; list fields (globs, exclude patterns) must come from
    a TOML file.

    Returns:
        Dict of field_name -> parsed_value for any PHP_INSIGHT_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the type is not supported

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load a TOML file and return the parsed dict.

    Raises:
        InvalidConfigError: If the file is not valid TOML
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        # Python 3.9-3.10
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise InvalidConfigError(str(path), "<file>", f"invalid TOML: {e}")
