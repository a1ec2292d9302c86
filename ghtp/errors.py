"""Exceptions raised by ghtp and helpers that build the common ones."""

from __future__ import annotations

import os
from collections.abc import Sequence

CONFIG_NAME = ".tp.toml"
TP_DIR = "gh-tp"


class TpError(Exception):
    """Base class for every error ghtp reports."""


class OperationInterrupted(TpError):
    """The user cancelled the running operation (e.g. with Ctrl+C)."""

    def __init__(self, message: str = "operation interrupted by user") -> None:
        super().__init__(message)


class FilePathError(TpError, ValueError):
    """A file name failed validation; ``path`` holds the rejected input."""

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


class ConfigValidationError(TpError, ValueError):
    """Configuration values do not satisfy their constraints."""


class ConfigFileError(TpError):
    """A configuration file is missing, unreadable or malformed."""


class BinaryNotFoundError(TpError):
    """No usable terraform/tofu binary could be determined."""


def _config_present(config_path: str | None) -> bool:
    return bool(config_path) and os.path.exists(config_path)


def build_no_binary_found_error(config_path: str | None) -> BinaryNotFoundError:
    """Build the error reported when neither tofu nor terraform is available."""
    message = "could not find 'tofu' or 'terraform' in your PATH"
    if _config_present(config_path):
        message += f" and 'binary' not set in {config_path}"
    else:
        message += (
            ". Please install one, specify with -b, or set 'binary' in "
            f"{CONFIG_NAME} (if using config)"
        )
    return BinaryNotFoundError(message)


def build_multiple_binaries_found_error(
    found_binaries: Sequence[str], config_path: str | None
) -> BinaryNotFoundError:
    """Build the error reported when more than one binary is on the PATH."""
    message = f"found both {' and '.join(found_binaries)} in your PATH"
    if _config_present(config_path):
        message += (
            ". Specify the desired one using the -b flag or set the 'binary' "
            f"parameter in {config_path}"
        )
    else:
        message += (
            ". Specify the desired one using the -b flag or create "
            f"{CONFIG_NAME} and set the 'binary' parameter"
        )
    return BinaryNotFoundError(message)