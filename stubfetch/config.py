"""Configuration file loader for stubfetch.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``stubfetch.toml``: settings under ``[stubfetch]`` table
- ``pyproject.toml``: settings under ``[tool.stubfetch]`` table

Discovery order:

1. Explicit path from ``--config`` or ``STUBFETCH_CONFIG``
2. ``stubfetch.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.stubfetch]`` section

Configuration precedence: defaults < config file < CLI args.

Example (``stubfetch.toml``)::

    [stubfetch]
    registry_url = "https://pypi.org/pypi"
    max_depth = 10
    output_layout = "typings"
    version_ordering = "literal"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Sequence
from dataclasses import dataclass, field

from stubfetch.exceptions import ConfigError
from stubfetch.utils.logger import get_logger
from stubfetch.constants import (
    DEFAULT_MAX_DEPTH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OUTPUT_LAYOUT,
    DEFAULT_REGISTRY_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_VERSION_ORDERING,
    OUTPUT_LAYOUTS,
    VERSION_ORDERINGS,
)

logger = get_logger("config")

CONFIG_FILENAME = "stubfetch.toml"
SECTION_NAME = "stubfetch"


@dataclass
class StubFetchConfig:
    """Parsed and validated stubfetch configuration.

    All fields have defaults, so an empty config file is valid.

    Attributes:
        registry_url: Base URL of the PyPI-compatible JSON API.
        max_depth: Deepest dependency level processed (root is level 1).
        timeout: HTTP timeout in seconds.
        max_retries: Retries for transient HTTP failures.
        output_layout: ``"typings"`` merges into ``stubs/typings``;
            ``"package"`` merges into ``stubs/<root package>``.
        version_ordering: ``"literal"`` or ``"semantic"`` candidate ordering.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    registry_url: str = DEFAULT_REGISTRY_URL
    max_depth: int = DEFAULT_MAX_DEPTH
    timeout: int = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    output_layout: str = DEFAULT_OUTPUT_LAYOUT
    version_ordering: str = DEFAULT_VERSION_ORDERING

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as a dictionary for debug logging."""
        return {
            "registry_url": self.registry_url,
            "max_depth": self.max_depth,
            "timeout": self.timeout,
            "max_retries": self.max_retries,
            "output_layout": self.output_layout,
            "version_ordering": self.version_ordering,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    own_file = cwd / CONFIG_FILENAME
    if own_file.is_file():
        logger.debug("Found %s: %s", CONFIG_FILENAME, own_file)
        return own_file

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_section(pyproject_toml):
        logger.debug("Found [tool.%s] in pyproject.toml: %s", SECTION_NAME, pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True if ``path`` parses and has a ``[tool.stubfetch]`` table.

    A pyproject.toml that does not parse is treated as having no section.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return SECTION_NAME in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> StubFetchConfig:
    """Load and validate stubfetch configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`StubFetchConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return StubFetchConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(SECTION_NAME, {})
    else:
        section = raw.get(SECTION_NAME, {})

    if not section:
        logger.debug("Config file found but has no %s section, using defaults", SECTION_NAME)
        return StubFetchConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _require_int(section: Dict[str, Any], key: str, minimum: int, config_path: str) -> int:
    val = section[key]
    # bool is an int subclass; reject it explicitly
    if isinstance(val, bool) or not isinstance(val, int):
        raise ConfigError(
            f"{key} must be an integer, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    if val < minimum:
        raise ConfigError(
            f"{key} must be >= {minimum}, got {val}",
            config_path=config_path,
            option=key,
        )
    return val


def _require_choice(
    section: Dict[str, Any], key: str, choices: Sequence[str], config_path: str
) -> str:
    val = section[key]
    if not isinstance(val, str):
        raise ConfigError(
            f"{key} must be a string, got {type(val).__name__}",
            config_path=config_path,
            option=key,
        )
    if val not in choices:
        raise ConfigError(
            f"{key} must be one of {', '.join(choices)}, got {val!r}",
            config_path=config_path,
            option=key,
        )
    return val


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> StubFetchConfig:
    """Validate a ``[stubfetch]`` or ``[tool.stubfetch]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = StubFetchConfig()

    known = set(config.to_log_dict())
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "registry_url" in section:
        val = section["registry_url"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "registry_url must be a non-empty string",
                config_path=config_path,
                option="registry_url",
            )
        config.registry_url = val.strip()

    if "max_depth" in section:
        config.max_depth = _require_int(section, "max_depth", 1, config_path)
    if "timeout" in section:
        config.timeout = _require_int(section, "timeout", 0, config_path)
    if "max_retries" in section:
        config.max_retries = _require_int(section, "max_retries", 0, config_path)
    if "output_layout" in section:
        config.output_layout = _require_choice(
            section, "output_layout", OUTPUT_LAYOUTS, config_path
        )
    if "version_ordering" in section:
        config.version_ordering = _require_choice(
            section, "version_ordering", VERSION_ORDERINGS, config_path
        )

    return config
