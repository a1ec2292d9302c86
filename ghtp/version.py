"""Version banner shown by ``--version``."""

from __future__ import annotations

import platform


def build_version(version: str, commit: str, date: str, built_by: str) -> str:
    """Return the version text including build metadata and platform."""
    result = version
    if commit:
        result = f"{result}\nCommit: {commit}\n"
    if date:
        result = f"{result}Built at: {date}\n"
    if built_by:
        result = f"{result}Built by: {built_by}\n"
    return f"{result}OS: {platform.system().lower()}\nArch: {platform.machine()}\n"