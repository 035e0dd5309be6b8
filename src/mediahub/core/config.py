"""Layered configuration.

Lookup order, first hit wins:
1. ``cli``: a nested dict handed in by the caller
2. ``env``: ``MEDIAHUB_<SECTION>_<KEY>`` environment variables
3. ``user_config``: ``~/.config/mediahub/config.yaml``
4. ``system_config``: ``/etc/mediahub/config.yaml``
5. ``default``: built-in defaults
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from mediahub.core.errors import ConfigError
from mediahub.core.logging import set_colors, set_verbosity

ENV_PREFIX = "MEDIAHUB_"

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
ALLOWED_COLLISION_POLICIES = frozenset({"rename", "skip", "error"})

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def default_config() -> dict[str, Any]:
    return {
        "logging": {"level": "normal", "color": True},
        "hashing": {"chunk_size": 64 * 1024},
        "import": {"collision_policy": "rename"},
        "maintenance": {"progress_interval": 1.0},
        "diagnostics": {"enabled": False, "path": None},
    }


def env_var_name(key: str) -> str:
    """``hashing.chunk_size`` -> ``MEDIAHUB_HASHING_CHUNK_SIZE``."""
    return ENV_PREFIX + key.upper().replace(".", "_")


def lookup(data: Any, key: str) -> Any | None:
    """Walk a dotted ``key`` through nested dicts; None when any step is missing."""
    node = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def read_yaml_mapping(path: Path) -> dict[str, Any]:
    """Top-level mapping of a YAML file; {} when the file is absent or not a mapping.

    Raises:
        ConfigError: the file exists but cannot be read or parsed.
    """
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        return {}
    return data


class ConfigResolver:
    """Resolves dotted keys across the configuration layers.

    Example:
        resolver = ConfigResolver(cli_args={"import": {"collision_policy": "skip"}})
        resolver.resolve("import.collision_policy")  # ('skip', 'cli')
        resolver.resolve_chunk_size()                # 65536 unless overridden
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> None:
        self.cli_args = cli_args or {}
        self.user_config_path = user_config_path or Path.home() / ".config/mediahub/config.yaml"
        self.system_config_path = system_config_path or Path("/etc/mediahub/config.yaml")
        self.defaults = defaults if defaults is not None else default_config()
        self._file_cache: dict[Path, dict[str, Any]] = {}

    def _file_layer(self, path: Path) -> dict[str, Any]:
        if path not in self._file_cache:
            self._file_cache[path] = read_yaml_mapping(path)
        return self._file_cache[path]

    def _layers(self, key: str) -> Iterator[tuple[str, Any | None]]:
        yield "cli", lookup(self.cli_args, key)
        yield "env", os.environ.get(env_var_name(key))
        yield "user_config", lookup(self._file_layer(self.user_config_path), key)
        yield "system_config", lookup(self._file_layer(self.system_config_path), key)
        yield "default", lookup(self.defaults, key)

    def resolve(self, key: str) -> tuple[Any, str]:
        """Return ``(value, layer_name)`` for the first layer that sets ``key``.

        Raises:
            ConfigError: no layer sets ``key``, or a config file is unreadable.
        """
        for layer, value in self._layers(key):
            if value is not None:
                return value, layer
        raise ConfigError(f"Config key '{key}' is not set in any layer")

    def resolve_optional(self, key: str) -> Any | None:
        for _layer, value in self._layers(key):
            if value is not None:
                return value
        return None

    def resolve_logging_level(self) -> str:
        return self._resolve_choice("logging.level", ALLOWED_LOGGING_LEVELS, "normal")

    def resolve_collision_policy(self) -> str:
        return self._resolve_choice("import.collision_policy", ALLOWED_COLLISION_POLICIES, "rename")

    def resolve_chunk_size(self) -> int:
        value = self._resolve_int("hashing.chunk_size", 64 * 1024)
        if value <= 0:
            raise ConfigError("Config key 'hashing.chunk_size' must be > 0")
        return value

    def resolve_progress_interval(self) -> float:
        raw = self.resolve_optional("maintenance.progress_interval")
        if raw is None:
            return 1.0
        if isinstance(raw, bool):
            raise ConfigError("Config key 'maintenance.progress_interval' must be a number")
        try:
            interval = float(raw)
        except (TypeError, ValueError):
            raise ConfigError(
                f"Config key 'maintenance.progress_interval' must be a number, got {raw!r}"
            ) from None
        if interval < 0:
            raise ConfigError("Config key 'maintenance.progress_interval' must be >= 0")
        return interval

    def resolve_color(self) -> bool:
        return self._resolve_bool("logging.color", True)

    def resolve_diagnostics_enabled(self) -> bool:
        return self._resolve_bool("diagnostics.enabled", False)

    def resolve_diagnostics_path(self) -> str | None:
        raw = self.resolve_optional("diagnostics.path")
        if raw is None:
            return None
        if not isinstance(raw, str) or not raw.strip():
            raise ConfigError("Config key 'diagnostics.path' must be a non-empty string")
        return raw

    def _resolve_choice(self, key: str, allowed: frozenset[str], fallback: str) -> str:
        raw = self.resolve_optional(key)
        if raw is None:
            return fallback
        if not isinstance(raw, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(raw).__name__}")
        choice = raw.strip().lower()
        if choice not in allowed:
            raise ConfigError(
                f"Invalid '{key}': {raw!r}. Allowed values: {', '.join(sorted(allowed))}"
            )
        return choice

    def _resolve_int(self, key: str, fallback: int) -> int:
        raw = self.resolve_optional(key)
        if raw is None:
            return fallback
        if isinstance(raw, int) and not isinstance(raw, bool):
            return raw
        if isinstance(raw, str) and raw.strip().isdigit():
            return int(raw.strip())
        raise ConfigError(f"Config key '{key}' must be an int, got {raw!r}")

    def _resolve_bool(self, key: str, fallback: bool) -> bool:
        raw = self.resolve_optional(key)
        if raw is None:
            return fallback
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise ConfigError(f"Config key '{key}' must be a bool, got {raw!r}")


def apply_logging_policy(resolver: ConfigResolver) -> None:
    """Push the resolved logging settings into the process logger."""
    set_verbosity(resolver.resolve_logging_level())
    set_colors(resolver.resolve_color())
