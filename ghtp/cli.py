"""The ``tp`` command: plan, render the plan as Markdown, report the results."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from collections.abc import Sequence
from typing import TextIO

from ghtp.errors import CONFIG_NAME, FilePathError, OperationInterrupted, TpError
from ghtp.init_cmd import run_init
from ghtp.markdown import create_markdown
from ghtp.settings import Settings, load_settings
from ghtp.tf import Spinner, create_plan
from ghtp.tools import (
    TpFile,
    check_files_by_extension,
    create_logger,
    determine_binary,
    exists_or_created,
    validate_file_path,
)
from ghtp.version import build_version

VERSION = "dev"
COMMIT = ""
DATE = ""
BUILT_BY = ""

INIT_DEBUG_ENV = "GH_TP_INIT_DEBUG"
TF_EXTENSIONS = (".tf", ".tofu")

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_USAGE = "tp [-o <planfile>] [-m <mdfile>] [-b <binary>] | tp - | tp init"
_DESCRIPTION = (
    "'tp' creates GitHub Flavored Markdown containing the output from an "
    "OpenTofu or Terraform plan, wrapped in a '<details></details>' element so "
    "the plan output is collapsed for easier reading on longer outputs. "
    "Flags (-o, -m, -b) can be used instead of a config file and override any "
    "config file settings. Use 'tp -' to read plan output directly from stdin. "
    "Run 'tp init' to create your .tp.toml config file."
)

_log = logging.getLogger(__name__)


def _required_file(settings: Settings, key: str, flag: str) -> str:
    loaded = settings.config_file_used
    if not settings.is_set(key):
        if not loaded:
            raise TpError(
                f"required parameter '{key}' not defined via flag ({flag}) and no "
                "loadable config file was found (checked standard locations for "
                f"'{CONFIG_NAME}', or specified via --config). Use the flag or run "
                "'gh tp init'"
            )
        raise TpError(
            f"required parameter '{key}' is not defined via flag ({flag}) or in the "
            f"loaded config file: {loaded}"
        )
    raw = str(settings.get(key))
    try:
        validated = validate_file_path(raw)
    except FilePathError as exc:
        _log.debug("%s validation failed: %s", key, raw)
        raise FilePathError(
            f"invalid '{key}' configuration/flag (\"{raw}\"): {exc}", raw
        ) from exc
    _log.debug("Using %s: %s", key, validated)
    return validated


def _remove_plan(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        _log.warning("Cleanup failed for %r: %s", path, exc)
    else:
        _log.debug("Cleanup success for %r.", path)


def _markdown(md_file: str, plan_str: str, binary: str) -> str:
    try:
        return create_markdown(md_file, plan_str, binary)
    except TpError as exc:
        raise TpError(f"markdown creation failed for '{md_file}': {exc}") from exc


def _read_stdin(stdin: TextIO) -> str:
    with Spinner(" Reading plan from stdin and creating Markdown..."):
        isatty = getattr(stdin, "isatty", None)
        if isatty is not None and isatty():
            raise TpError("no input provided via stdin pipe or redirect")
        try:
            return stdin.read()
        except OSError as exc:
            raise TpError(f"failed to read from stdin: {exc}") from exc


def run(settings: Settings, args: Sequence[str] = (), stdin: TextIO | None = None) -> None:
    """Run tp with resolved ``settings`` and positional ``args``.

    With no arguments a plan is created and rendered; with ``-`` the plan text
    is read from ``stdin``. Raises TpError on failure; returns quietly when the
    user interrupts the plan.
    """
    args = list(args)
    binary = determine_binary(settings.get("binary"), settings.config_file_used)
    _log.debug("Using binary: %s", binary)

    plan_file = _required_file(settings, "planFile", "-o/--planFile")
    md_file = _required_file(settings, "mdFile", "-m/--mdFile")

    if settings.config_file_used:
        _log.debug("Effective config file used: %s", settings.config_file_used)
    else:
        _log.debug("No config file loaded; using flags and/or auto-detection.")

    if not args:
        if not check_files_by_extension(".", TF_EXTENSIONS):
            name = binary.title()
            raise TpError(
                f"no {name} files found in current directory. Please run this in a "
                f"directory with {name} files"
            )
        try:
            plan_str = create_plan(binary, plan_file)
        except OperationInterrupted:
            _log.info("Operation cancelled by user.")
            _remove_plan(plan_file)
            return
        md_written = _markdown(md_file, plan_str, binary)
        files = [TpFile(plan_file, "Plan"), TpFile(md_written, "Markdown")]
    elif args[0] == "-":
        plan_str = _read_stdin(stdin if stdin is not None else sys.stdin)
        if not plan_str:
            raise TpError("received empty plan from stdin")
        _log.debug("Read %d bytes from stdin.", len(plan_str))
        md_written = _markdown(md_file, plan_str, binary)
        _log.info("✔  Markdown Created from stdin...")
        files = [TpFile(md_written, "Markdown")]
    else:
        raise TpError(
            f"unexpected argument: {args[0]}. Use '-' to read from stdin or no "
            "arguments to run plan"
        )

    try:
        exists_or_created(files)
    except TpError as exc:
        raise TpError(f"output file verification failed ({exc}): {exc}") from exc
    _log.debug("Processing complete.")


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tp", usage=_USAGE, description=_DESCRIPTION)
    parser.add_argument("-v", "--verbose", action="store_true", default=None,
                        help="verbose output")
    parser.add_argument("-b", "--binary",
                        help="expect either 'tofu' or 'terraform'. Must exist on your $PATH.")
    parser.add_argument("-o", "--planFile", dest="plan_file",
                        help="the name of the plan output file to be created by tp.")
    parser.add_argument("-m", "--mdFile", dest="md_file",
                        help="the name of the Markdown file to be created by tp.")
    parser.add_argument("-c", "--config", default="",
                        help=f"config file to use instead of the default {CONFIG_NAME} lookup")
    parser.add_argument("--version", action="store_true", help="show the version")
    parser.add_argument("args", nargs="*", help="'-' to read the plan from stdin, or 'init'")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point of the ``tp`` command; returns the process exit status."""
    create_logger(os.environ.get(INIT_DEBUG_ENV, "") in _TRUE)

    try:
        options = _parser().parse_args(list(argv) if argv is not None else None)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    if options.version:
        sys.stdout.write(f"Version {build_version(VERSION, COMMIT, DATE, BUILT_BY)}")
        return 0

    flags = {
        "verbose": options.verbose,
        "binary": options.binary,
        "planFile": options.plan_file,
        "mdFile": options.md_file,
    }
    try:
        settings = load_settings(options.config or None, flags)
        if settings.is_set("verbose"):
            create_logger(settings.get_bool("verbose"))

        args = options.args
        if args and args[0] in ("init", "i"):
            if len(args) > 1:
                raise TpError(f'unknown command "{args[1]}" for "tp init"')
            run_init(settings)
        else:
            run(settings, args, sys.stdin)
    except (TpError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())