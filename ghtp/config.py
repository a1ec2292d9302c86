"""Creating, validating and writing the ``.tp.toml`` configuration file."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

import click
import tomlkit

from ghtp.errors import CONFIG_NAME, ConfigValidationError, OperationInterrupted
from ghtp.tools import SUPPORTED_BINARIES, backup_file, does_exist

_log = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

_COMMENTS = {
    "binary": (
        "binary: (type: string) The name of the binary, expect either 'tofu' or "
        "'terraform'. Must exist on your $PATH."
    ),
    "planFile": "planFile: (type: string) The name of the plan file created by 'gh tp'.",
    "mdFile": "mdFile: (type: string) The name of the Markdown file created by 'gh tp'.",
    "verbose": "verbose: (type: bool) Enable Verbose Logging. Default is false.",
}


@dataclass
class ConfigParams:
    """The settings stored in a configuration file."""

    binary: str
    plan_file: str
    md_file: str
    verbose: bool = False

    def as_toml_items(self) -> dict[str, object]:
        return {
            "binary": self.binary,
            "planFile": self.plan_file,
            "mdFile": self.md_file,
            "verbose": self.verbose,
        }


class FileChecker(Protocol):
    """Something that can tell whether a file exists."""

    def does_exist(self, cfg_file: str) -> bool: ...


class UserPrompt(Protocol):
    """Something that can ask whether to create or overwrite a file."""

    def ask_overwrite(self, config_exists: bool) -> bool: ...


class RealFileChecker:
    """Checks the real filesystem."""

    def does_exist(self, cfg_file: str) -> bool:
        return does_exist(cfg_file)


@dataclass
class RealUserPrompt:
    """Asks the user on the terminal, or through ``confirm`` when given."""

    confirm: Confirm | None = None

    def ask_overwrite(self, config_exists: bool) -> bool:
        return query(config_exists, self.confirm)


def gen_config(conf: ConfigParams) -> str:
    """Render the parameters as commented TOML."""
    doc = tomlkit.document()
    for key, value in conf.as_toml_items().items():
        doc.add(tomlkit.comment(_COMMENTS[key]))
        doc.add(key, value)
    return tomlkit.dumps(doc)


def _issues(conf: ConfigParams) -> list[tuple[str, str, str]]:
    issues = []
    if conf.binary not in SUPPORTED_BINARIES:
        issues.append(("Binary", "oneof", "terraform tofu"))
    if not conf.plan_file:
        issues.append(("PlanFile", "required", ""))
    if not conf.md_file:
        issues.append(("MdFile", "required", ""))
    elif conf.md_file == conf.plan_file:
        issues.append(("MdFile", "nefield", "PlanFile"))
    if not isinstance(conf.verbose, bool):
        issues.append(("Verbose", "boolean", ""))
    return issues


def validate_config(conf: ConfigParams) -> ConfigParams:
    """Return ``conf`` if valid, otherwise raise ConfigValidationError."""
    issues = _issues(conf)
    if issues:
        details = "; ".join(
            f"Field: {field}, Error: {tag}, Param: {param}" for field, tag, param in issues
        )
        raise ConfigValidationError(f"validation failed: {details}")
    return conf


def _click_confirm(title: str) -> bool:
    try:
        return click.confirm(title, default=False)
    except click.Abort as exc:
        raise OperationInterrupted() from exc


def query(config_exists: bool, confirm: Confirm | None = None) -> bool:
    """Ask whether to create a new config file or overwrite the existing one."""
    title = "Overwrite existing config file?" if config_exists else "Create new file?"
    ask = confirm if confirm is not None else _click_confirm
    try:
        return bool(ask(title))
    except Exception as exc:
        _log.error("%s", exc)
        raise


def create_or_overwrite(
    cfg_file: str, file_checker: FileChecker, user_prompt: UserPrompt
) -> tuple[bool, bool]:
    """Return whether the config exists and whether the user wants it written."""
    config_exists = file_checker.does_exist(cfg_file)
    _log.debug("Using config: %s", cfg_file)
    create_file = user_prompt.ask_overwrite(config_exists)
    return config_exists, create_file


def _write_private(path: str, data: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as handle:
        handle.write(data)


def create_config(
    cfg_binary: str,
    cfg_file: str,
    cfg_md_file: str,
    cfg_plan_file: str,
    file_checker: FileChecker | None = None,
    user_prompt: UserPrompt | None = None,
) -> None:
    """Ask the user, then write (backing up any existing) configuration file."""
    config_exists, create_file = create_or_overwrite(
        cfg_file,
        file_checker if file_checker is not None else RealFileChecker(),
        user_prompt if user_prompt is not None else RealUserPrompt(),
    )

    conf = ConfigParams(
        binary=cfg_binary, plan_file=cfg_plan_file, md_file=cfg_md_file, verbose=False
    )
    try:
        validate_config(conf)
    except ConfigValidationError as exc:
        _log.error("%s", exc)
    else:
        _log.debug("Config is valid")

    config = gen_config(conf)

    if not create_file:
        _log.info("%s", config)
        return

    config_dir = os.path.dirname(cfg_file) or "."
    if not does_exist(config_dir):
        os.makedirs(config_dir, 0o750, exist_ok=True)

    if config_exists:
        _log.debug("Config is: \n%s\n", config)
        backup = f"{cfg_file}-{datetime.now().strftime('%Y%m%d%H%M')}"
        backup_file(cfg_file, backup)
        _log.info("Backup file %s created", backup)
    else:
        _log.debug("Creating new %s with: %s", CONFIG_NAME, config)
    _write_private(cfg_file, config)
    _log.info("Config file %s created", cfg_file)