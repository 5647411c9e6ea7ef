"""Configuration file loader for depbump.

Two layouts are recognised:

- ``depbump.toml`` with settings under a ``[depbump]`` table
- ``pyproject.toml`` with settings under ``[tool.depbump]``

Discovery order:

1. Explicit path from ``--config`` or ``DEPBUMP_CONFIG``
2. ``depbump.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.depbump]`` table

Precedence: defaults < config file < CLI options.

Example (``depbump.toml``)::

    [depbump]
    package_manager = "composer"
    library = true
    update_strategy = "widen_ranges"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import tomli as tomllib

from depbump.constants import (
    CONFIG_FILE_NAME,
    CONFIG_SECTION,
    DEFAULT_LIBRARY,
    DEFAULT_PACKAGE_MANAGER,
)
from depbump.exceptions import ConfigError, UnsupportedPackageManager
from depbump.models import PackageManager, UpdateStrategy
from depbump.utils.logger import get_logger

logger = get_logger("config")


@dataclass
class DepBumpConfig:
    """Validated depbump settings.

    Attributes:
        package_manager: Ecosystem used when the CLI does not name one.
        library: Treat dependencies as library dependencies (widen ranges).
        update_strategy: Explicit strategy; ``None`` derives it from
            ``library``.
        source_path: File the settings came from, ``None`` for defaults.
    """

    package_manager: PackageManager = PackageManager(DEFAULT_PACKAGE_MANAGER)
    library: bool = DEFAULT_LIBRARY
    update_strategy: Optional[UpdateStrategy] = None

    source_path: Optional[Path] = field(default=None, repr=False)

    @property
    def effective_strategy(self) -> UpdateStrategy:
        if self.update_strategy is not None:
            return self.update_strategy
        return UpdateStrategy.default_for(self.library)

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "package_manager": self.package_manager.value,
            "library": self.library,
            "update_strategy": self.update_strategy.value if self.update_strategy else None,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Path given by the user. It must exist.

    Returns:
        Resolved path to the config file, or ``None`` if there is none.

    Raises:
        ConfigError: ``explicit_path`` does not exist.
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

    dedicated = cwd / CONFIG_FILE_NAME
    if dedicated.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, dedicated)
        return dedicated

    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file() and _pyproject_has_section(pyproject):
        logger.debug("Found [tool.%s] in %s", CONFIG_SECTION, pyproject)
        return pyproject

    logger.debug("No configuration file found")
    return None


def _pyproject_has_section(path: Path) -> bool:
    """Return True when ``pyproject.toml`` has a ``[tool.depbump]`` table.

    An unreadable or invalid file simply does not count.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return CONFIG_SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepBumpConfig:
    """Load and validate depbump configuration.

    Args:
        config_path: Explicit config file; auto-discovered when ``None``.

    Returns:
        The validated configuration, or defaults when no file exists.

    Raises:
        ConfigError: The file cannot be parsed or contains invalid options.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepBumpConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(CONFIG_SECTION, {})
    else:
        section = raw.get(CONFIG_SECTION, {})

    if not section:
        logger.debug("Config file has no %s table, using defaults", CONFIG_SECTION)
        return DepBumpConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
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


_KNOWN_KEYS = frozenset({"package_manager", "library", "update_strategy"})


def _parse_section(section: Dict[str, Any], *, config_path: str) -> DepBumpConfig:
    """Validate a ``[depbump]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or unknown enum values.
    """
    unknown = set(section) - _KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    config = DepBumpConfig()

    if "package_manager" in section:
        value = _expect(section, "package_manager", str, config_path)
        try:
            config.package_manager = PackageManager.parse(value)
        except UnsupportedPackageManager as exc:
            raise ConfigError(
                f"Unknown package manager: {value}",
                config_path=config_path,
                option="package_manager",
            ) from exc

    if "library" in section:
        config.library = _expect(section, "library", bool, config_path)

    if "update_strategy" in section:
        value = _expect(section, "update_strategy", str, config_path)
        try:
            config.update_strategy = UpdateStrategy(value)
        except ValueError as exc:
            choices = ", ".join(s.value for s in UpdateStrategy)
            raise ConfigError(
                f"update_strategy must be one of {choices}, got {value!r}",
                config_path=config_path,
                option="update_strategy",
            ) from exc

    return config


def _expect(section: Dict[str, Any], key: str, kind: type, config_path: str) -> Any:
    value = section[key]
    if not isinstance(value, kind):
        raise ConfigError(
            f"{key} must be a {'boolean' if kind is bool else 'string'}, "
            f"got {type(value).__name__}",
            config_path=config_path,
            option=key,
        )
    return value
