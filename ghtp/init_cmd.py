"""Interactive ``init`` command that writes a ``.tp.toml`` configuration file."""

from __future__ import annotations

import logging

import click

from ghtp.config import create_config
from ghtp.errors import CONFIG_NAME, TP_DIR, ConfigValidationError
from ghtp.settings import Settings
from ghtp.tools import create_logger, get_directories

BINARY_CHOICES = (("OpenTofu", "tofu"), ("Terraform", "terraform"))
DEFAULT_BINARY = "terraform"
PLAN_SUGGESTIONS = ("tpplan.out", "tp.out", "tp.plan", "plan.out", "out.plan ...")
MD_SUGGESTIONS = ("tpplan.md", "tp.md", "plan.md", "out.md")

_log = logging.getLogger(__name__)


def config_locations(home_dir: str, config_dir: str, cwd: str) -> list[tuple[str, str]]:
    """Return the (label, path) pairs offered for saving the config file.

    The first entry, the project root, is the default.
    """
    config_path = f"{config_dir}/{TP_DIR}/{CONFIG_NAME}"
    home_path = f"{home_dir}/{CONFIG_NAME}"
    return [
        (f"Project Root:{CONFIG_NAME}", f"{cwd}/{CONFIG_NAME}"),
        (f"Home Config Directory: {config_path}", config_path),
        (f"Home Directory: {home_path}", home_path),
    ]


def validate_plan_file(value: str) -> str:
    """Return the plan file name, or raise if it is empty."""
    if not value:
        raise ConfigValidationError(
            "This field is required. Please enter what your plan's output file "
            "should be named"
        )
    return value


def validate_md_file(value: str, plan_file: str) -> str:
    """Return the Markdown file name, or raise if empty or equal to the plan file."""
    if not value:
        raise ConfigValidationError(
            "This field is required. Please enter what your Markdown file should be named"
        )
    if value == plan_file:
        raise ConfigValidationError(
            "Your Markdown file should not share the same name as your plan output file."
        )
    return value


def _choose_location(locations: list[tuple[str, str]]) -> str:
    click.echo("Where would you like to save your .tp.toml config file?")
    for number, (label, _path) in enumerate(locations, start=1):
        click.echo(f"  {number}) {label}")
    choice = click.prompt(
        "Choose a location",
        type=click.IntRange(1, len(locations)),
        default=1,
    )
    return locations[int(choice) - 1][1]


def _choose_binary() -> str:
    labels = ", ".join(f"{name} ({value})" for name, value in BINARY_CHOICES)
    click.echo(f"Choose your binary: {labels}")
    return str(
        click.prompt(
            "Binary",
            type=click.Choice([value for _name, value in BINARY_CHOICES]),
            default=DEFAULT_BINARY,
        )
    )


def _ask_validated(title: str, suggestions: tuple[str, ...], check) -> str:
    hint = " ".join(suggestions)
    while True:
        value = str(
            click.prompt(f"{title}(example: {hint})", default="", show_default=False)
        ).strip()
        try:
            return check(value)
        except ConfigValidationError as exc:
            click.echo(str(exc), err=True)


def run_init(settings: Settings) -> str | None:
    """Ask for the config values and write the file.

    Returns the path of the configuration file, or None when the user cancels.
    """
    if settings.is_set("verbose"):
        create_logger(settings.get_bool("verbose"))

    home_dir, config_dir, cwd = get_directories()

    try:
        path = _choose_location(config_locations(home_dir, config_dir, cwd))
        binary = _choose_binary()
        plan_file = _ask_validated(
            "What do you want the name of your plan's output file to be? ",
            PLAN_SUGGESTIONS,
            validate_plan_file,
        )
        md_file = _ask_validated(
            "What do you want the name of your Markdown file to be?  ",
            MD_SUGGESTIONS,
            lambda value: validate_md_file(value, plan_file),
        )
    except click.Abort:
        _log.error("Configuration cancelled by user.")
        return None

    create_config(binary, path, md_file, plan_file)
    return path