"""Layered settings: command-line flags, then environment, then config file."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ghtp.errors import CONFIG_NAME, TP_DIR, ConfigFileError, TpError
from ghtp.tools import get_directories

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})
_log = logging.getLogger(__name__)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value in _TRUE
    if isinstance(value, (int, float)):
        return value != 0
    return False


@dataclass
class Settings:
    """Resolved settings; keys are case-insensitive.

    A key is looked up in ``flags`` first, then in the environment variable
    named after the key in upper case, then in ``config``.
    """

    flags: Mapping[str, Any] = field(default_factory=dict)
    config: Mapping[str, Any] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=dict)
    config_file_used: str | None = None

    def __post_init__(self) -> None:
        self.flags = {k.lower(): v for k, v in self.flags.items() if v is not None}
        self.config = {k.lower(): v for k, v in self.config.items()}

    def _lookup(self, key: str) -> tuple[bool, Any]:
        name = key.lower()
        if name in self.flags:
            return True, self.flags[name]
        env_value = self.environ.get(name.upper())
        if env_value:
            return True, env_value
        if name in self.config:
            return True, self.config[name]
        return False, None

    def is_set(self, key: str) -> bool:
        """Tell whether any layer provides a value for ``key``."""
        return self._lookup(key)[0]

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` when unset."""
        found, value = self._lookup(key)
        return value if found else default

    def get_bool(self, key: str) -> bool:
        """Return ``key`` as a boolean; unset or unparsable values are False."""
        return _to_bool(self.get(key))


def find_config_file(search_dirs: Iterable[str | os.PathLike]) -> str | None:
    """Return the first ``.tp.toml`` found in ``search_dirs``, or None."""
    for directory in search_dirs:
        candidate = os.path.join(directory, CONFIG_NAME)
        if os.path.isfile(candidate):
            return os.path.abspath(candidate)
    return None


def default_search_dirs() -> list[str]:
    """Return the standard lookup order: cwd, config dir, home dir."""
    try:
        dirs = get_directories()
    except TpError as exc:
        _log.debug("Cannot determine home/config directories: %s", exc)
        return []
    return [".", os.path.join(dirs.config, TP_DIR), dirs.home]


def _parse(path: str) -> dict[str, Any]:
    with open(path, "rb") as handle:
        return tomllib.load(handle)


def load_settings(
    config_file: str | None = None, flags: Mapping[str, Any] | None = None
) -> Settings:
    """Build settings from flags, the environment and a configuration file.

    An explicit ``config_file`` that does not exist raises ConfigFileError.
    Without one, the default locations are searched and a malformed file found
    there raises ConfigFileError.
    """
    config: dict[str, Any] = {}
    if config_file:
        path: str | None = config_file
        if not os.path.exists(config_file):
            _log.error("Config file specified via --config not found.")
            raise ConfigFileError("Config file specified via --config not found.")
        try:
            config = _parse(config_file)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            _log.debug("Error reading specified config file %s: %s", config_file, exc)
        else:
            _log.debug("Successfully read config file: %s", config_file)
    else:
        path = find_config_file(default_search_dirs())
        if path is None:
            _log.debug("No config file (%s) found in default locations.", CONFIG_NAME)
        else:
            try:
                config = _parse(path)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigFileError(f"While parsing config: {exc}") from exc
            except OSError as exc:
                _log.debug("Error reading potential config file: %s", exc)
            else:
                _log.debug("Successfully read config file: %s", path)

    return Settings(
        flags=dict(flags or {}),
        config=config,
        environ=dict(os.environ),
        config_file_used=path,
    )