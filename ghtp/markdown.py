"""Rendering plan output as a collapsible GitHub Flavored Markdown block."""

from __future__ import annotations

import logging

from ghtp.errors import TpError
from ghtp.tools import validate_file_path

SYNTAX_HIGHLIGHT_TERRAFORM = "terraform"

_TITLES = {"tofu": "OpenTofu plan", "terraform": "Terraform plan"}
_log = logging.getLogger(__name__)


def _title(binary_name: str) -> str:
    title = _TITLES.get(binary_name.lower())
    if title is None:
        _log.warning("Unknown binary name '%s', using default markdown title.", binary_name)
        return "Plan Details"
    return title


def render_markdown(plan_str: str, binary_name: str) -> str:
    """Return the document wrapping ``plan_str`` in a ``<details>`` block."""
    code_block = f"```{SYNTAX_HIGHLIGHT_TERRAFORM}\n{plan_str}\n```"
    body = f"\n{code_block}\n"
    return f"<details><summary>{_title(binary_name)}</summary>\n{body}\n</details>\n"


def create_markdown(md_param: str, plan_str: str, binary_name: str) -> str:
    """Write the plan Markdown to ``md_param`` in the current directory.

    Returns the validated file name. Nothing is written for an empty plan.
    """
    filename = validate_file_path(md_param)
    if not plan_str:
        _log.debug(
            "Plan output is empty. Skipping Markdown file creation for %r.", filename
        )
        return filename

    content = render_markdown(plan_str, binary_name)
    _log.debug("Attempting to create/write markdown file: %s", filename)
    try:
        with open(filename, "w", encoding="utf-8") as handle:
            handle.write(content)
    except OSError as exc:
        _log.error("Failed to write markdown file '%s': %s", filename, exc)
        raise TpError(f"failed to create markdown file {filename}: {exc}") from exc
    _log.debug("Successfully wrote markdown content to %s", filename)
    return filename