import os
import tomllib
from unittest import mock

import click
import pytest

from ghtp.errors import ConfigValidationError
from ghtp.init_cmd import (
    config_locations,
    run_init,
    validate_md_file,
    validate_plan_file,
)
from ghtp.settings import Settings


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_config_locations_order_and_paths():
    locations = config_locations("/h", "/h/.config", "/work")
    paths = [path for _label, path in locations]
    assert paths == ["/work/.tp.toml", "/h/.config/gh-tp/.tp.toml", "/h/.tp.toml"]
    assert locations[0][0] == "Project Root:.tp.toml"
    assert locations[1][0].endswith("/h/.config/gh-tp/.tp.toml")
    assert locations[2][0].startswith("Home Directory: ")


def test_validate_plan_file_accepts_value():
    assert validate_plan_file("plan.out") == "plan.out"


def test_validate_plan_file_rejects_empty():
    with pytest.raises(ConfigValidationError, match="This field is required"):
        validate_plan_file("")


def test_validate_md_file_accepts_distinct_name():
    assert validate_md_file("plan.md", "plan.out") == "plan.md"


def test_validate_md_file_rejects_empty():
    with pytest.raises(ConfigValidationError, match="This field is required"):
        validate_md_file("", "plan.out")


def test_validate_md_file_rejects_same_as_plan():
    with pytest.raises(ConfigValidationError, match="should not share the same name"):
        validate_md_file("plan.out", "plan.out")


def _read(path):
    with open(path, "rb") as handle:
        return tomllib.load(handle)


def test_run_init_writes_project_root_config(home):
    answers = [1, "terraform", "plan.out", "plan.md"]
    with mock.patch("click.prompt", side_effect=answers), mock.patch(
        "click.confirm", return_value=True
    ):
        path = run_init(Settings())
    assert os.path.samefile(os.path.dirname(path), home)
    assert _read(path) == {
        "binary": "terraform",
        "planFile": "plan.out",
        "mdFile": "plan.md",
        "verbose": False,
    }


def test_run_init_creates_config_directory(home):
    answers = [2, "tofu", "tp.out", "tp.md"]
    with mock.patch("click.prompt", side_effect=answers), mock.patch(
        "click.confirm", return_value=True
    ):
        path = run_init(Settings())
    expected = home / ".config" / "gh-tp" / ".tp.toml"
    assert path.endswith(os.path.join(".config", "gh-tp", ".tp.toml"))
    assert os.path.samefile(path, expected)
    assert _read(path) == {
        "binary": "tofu",
        "planFile": "tp.out",
        "mdFile": "tp.md",
        "verbose": False,
    }


def test_run_init_reprompts_on_invalid_names(home):
    answers = [3, "terraform", "", "plan.out", "plan.out", "plan.md"]
    with mock.patch("click.prompt", side_effect=answers) as prompt, mock.patch(
        "click.confirm", return_value=True
    ):
        path = run_init(Settings())
    assert prompt.call_count == len(answers)
    data = _read(path)
    assert data["planFile"] == "plan.out"
    assert data["mdFile"] == "plan.md"


def test_run_init_cancel_writes_nothing(home):
    with mock.patch("click.prompt", side_effect=click.Abort()):
        result = run_init(Settings())
    assert result is None
    assert not (home / ".tp.toml").exists()


def test_run_init_declined_confirmation_writes_nothing(home):
    answers = [1, "terraform", "plan.out", "plan.md"]
    with mock.patch("click.prompt", side_effect=answers), mock.patch(
        "click.confirm", return_value=False
    ):
        path = run_init(Settings())
    assert path.endswith(".tp.toml")
    assert not os.path.exists(path)