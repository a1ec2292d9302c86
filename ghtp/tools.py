"""Filesystem, PATH and logging helpers shared by the commands."""

from __future__ import annotations

import errno
import glob
import logging
import os
import re
import shutil
import stat
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import NamedTuple, TextIO

from ghtp.errors import (
    BinaryNotFoundError,
    ConfigValidationError,
    FilePathError,
    TpError,
    build_multiple_binaries_found_error,
    build_no_binary_found_error,
)

MAX_FILENAME_LENGTH = 255
SUPPORTED_BINARIES = ("terraform", "tofu")

_VALID_FILENAME = re.compile(r"[a-zA-Z0-9_\-.]+")
_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class TpFile:
    """A file produced by tp together with what it is for."""

    name: str
    purpose: str


class Directories(NamedTuple):
    home: str
    config: str
    cwd: str


def determine_binary(configured: str | None, config_path: str | None) -> str:
    """Pick the binary from the configuration or by searching the PATH."""
    binary = get_binary_from_config(configured)
    if binary:
        return binary
    detected = auto_detect_binary(config_path)
    if detected:
        return detected
    raise build_no_binary_found_error(config_path)


def get_binary_from_config(configured: str | None) -> str | None:
    """Validate a binary named by flag or config; None when none was named."""
    _log.debug("Binary is set: %s", bool(configured))
    if not configured:
        return None
    if configured not in SUPPORTED_BINARIES:
        raise ConfigValidationError(
            f"invalid binary specified ('{configured}'): must be 'terraform' or 'tofu'"
        )
    if shutil.which(configured) is None:
        raise BinaryNotFoundError(
            f"binary '{configured}' specified but not found in PATH"
        )
    _log.debug("Using binary specified via flag or config: %s", configured)
    return configured


def auto_detect_binary(config_path: str | None) -> str | None:
    """Return the single tofu/terraform binary on the PATH, or None."""
    _log.debug("Binary not specified, attempting auto-detection...")
    found = []
    for name in ("tofu", "terraform"):
        location = shutil.which(name)
        if location:
            found.append(name)
            _log.debug("Found '%s' in PATH at '%s'", name, location)
        else:
            _log.debug("Did not find '%s' in PATH", name)
    if not found:
        return None
    if len(found) > 1:
        raise build_multiple_binaries_found_error(found, config_path)
    _log.debug("Auto-detected binary: %s", found[0])
    return found[0]


def check_files_by_extension(directory: str | os.PathLike, exts: Iterable[str]) -> bool:
    """Tell whether ``directory`` holds a file with any of the extensions."""
    base = glob.escape(os.fspath(directory))
    return any(
        glob.glob(os.path.join(base, "*" + ext), include_hidden=True) for ext in exts
    )


def _use_color(out: TextIO) -> bool:
    isatty = getattr(out, "isatty", None)
    return bool(isatty and isatty()) and "NO_COLOR" not in os.environ


def _paint(text: str, color_code: int, enabled: bool) -> str:
    if not enabled:
        return text
    return f"\x1b[1m\x1b[{color_code}m{text}\x1b[0m\x1b[0m"


def exists_or_created(files: Iterable[TpFile], out: TextIO | None = None) -> None:
    """Print a created/failed line for every file."""
    stream = out if out is not None else sys.stdout
    color = _use_color(stream)
    for item in files:
        if does_exist(item.name):
            _log.debug("%s file %s was created", item.purpose, item.name)
            line = f"{_paint('✔', 32, color)}  {item.purpose} Created...\n"
        else:
            _log.debug("%s file %s was not created", item.purpose, item.name)
            line = f"{_paint('✕', 31, color)}  {item.purpose} Failed to Create\n"
        try:
            stream.write(line)
        except OSError as exc:
            raise TpError(f"failed to display status: {exc}") from exc


def does_exist(path: str | os.PathLike) -> bool:
    """Tell whether anything exists at ``path``."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    except OSError:
        return True
    return True


def _home_dir() -> str:
    if sys.platform == "win32":
        home = os.environ.get("USERPROFILE", "")
        if not home:
            raise TpError("failed to get home directory: %USERPROFILE% is not defined")
    else:
        home = os.environ.get("HOME", "")
        if not home:
            raise TpError("failed to get home directory: $HOME is not defined")
    return home


def _config_dir() -> str:
    if sys.platform == "win32":
        appdata = os.environ.get("AppData", "")
        if not appdata:
            raise TpError("failed to get config directory: %AppData% is not defined")
        return appdata
    if sys.platform == "darwin":
        home = os.environ.get("HOME", "")
        if not home:
            raise TpError("failed to get config directory: $HOME is not defined")
        return os.path.join(home, "Library", "Application Support")
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        if not os.path.isabs(xdg):
            raise TpError(
                "failed to get config directory: path in $XDG_CONFIG_HOME is relative"
            )
        return xdg
    home = os.environ.get("HOME", "")
    if not home:
        raise TpError(
            "failed to get config directory: neither $XDG_CONFIG_HOME nor $HOME are defined"
        )
    return os.path.join(home, ".config")


def get_directories() -> Directories:
    """Return the user's home, config and current working directories."""
    home = _home_dir()
    config = _config_dir()
    try:
        cwd = os.getcwd()
    except OSError as exc:
        raise TpError(f"failed to get current working directory: {exc}") from exc
    return Directories(home, config, cwd)


def backup_file(source: str | os.PathLike, dest: str | os.PathLike) -> None:
    """Copy ``source`` to ``dest``; the source must be an existing file."""
    try:
        info = os.stat(source)
    except FileNotFoundError as exc:
        raise FileNotFoundError(
            errno.ENOENT, f"backup source file {os.fspath(source)!r} does not exist", source
        ) from exc
    if stat.S_ISDIR(info.st_mode):
        raise IsADirectoryError(
            errno.EISDIR,
            f"backup source {os.fspath(source)!r} is a directory, expected a file",
            source,
        )
    with open(source, "rb") as src, open(dest, "wb") as dst:
        try:
            shutil.copyfileobj(src, dst)
        except OSError:
            dst.close()
            try:
                os.remove(dest)
            except OSError:
                pass
            raise
        copied = dst.tell()
        dst.flush()
        os.fsync(dst.fileno())
    _log.debug("Copied %d bytes from %s to %s", copied, source, dest)
    _log.debug("Successfully backed up %s to %s", source, dest)


def create_logger(verbose: bool) -> logging.Logger:
    """Configure and return the package logger for the given verbosity."""
    logger = logging.getLogger("ghtp")
    if verbose:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname).4s <%(filename)s:%(lineno)d> %(message)s",
            datefmt="%Y/%m/%d %H:%M:%S",
        )
        level = logging.DEBUG
    else:
        formatter = logging.Formatter("%(levelname).4s %(message)s")
        level = logging.INFO

    handler = next(
        (h for h in logger.handlers if getattr(h, "_ghtp_handler", False)), None
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._ghtp_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    handler.setFormatter(formatter)
    logger.setLevel(level)
    logger.propagate = False
    logger.debug(
        "Logger configured. Verbose: %s, Level set to: %s",
        verbose,
        logging.getLevelName(level),
    )
    return logger


def _base(path: str) -> str:
    stripped = path.rstrip("/" + os.sep)
    if not stripped:
        return os.sep
    return os.path.basename(stripped)


def validate_file_path(path: str) -> str:
    """Return ``path`` cleaned to a bare, safe file name, or raise FilePathError."""
    if not path:
        raise FilePathError("invalid file path: filename cannot be empty", path)

    cleaned = os.path.normpath(path)
    if _base(cleaned) != cleaned or cleaned in (".", ".."):
        raise FilePathError(
            f'invalid file path: "{path}" must be a filename only (no directory separators)',
            path,
        )
    if not _VALID_FILENAME.fullmatch(cleaned):
        raise FilePathError(
            f'invalid file path: filename "{cleaned}" contains invalid characters '
            "(allowed: a-z, A-Z, 0-9, _, -, .)",
            path,
        )
    if len(cleaned) > MAX_FILENAME_LENGTH:
        raise FilePathError(
            f'invalid file path: filename "{cleaned}" exceeds maximum length of '
            f"{MAX_FILENAME_LENGTH}",
            path,
        )
    if "\x00" in cleaned:
        raise FilePathError(
            f'invalid file path: filename "{cleaned}" contains null byte', path
        )
    return cleaned


def _join_names(names: Sequence[str]) -> str:
    return ", ".join(names)