import os

import pytest

from ghtp.errors import ConfigFileError
from ghtp.settings import (
    Settings,
    default_search_dirs,
    find_config_file,
    load_settings,
)

ENV_KEYS = ("BINARY", "PLANFILE", "MDFILE", "VERBOSE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write(path, text):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


def test_missing_explicit_config_raises(tmp_path):
    with pytest.raises(ConfigFileError, match="not found"):
        load_settings(str(tmp_path / "missing" / ".tp.toml"), {})


def test_config_without_plan_file(tmp_path):
    cfg = _write(
        tmp_path / "noPlanFile" / ".tp.toml",
        'binary = "terraform"\nmdFile = "plan.md"\n',
    )
    settings = load_settings(str(cfg), {})
    assert settings.is_set("planFile") is False
    assert settings.get("mdFile") == "plan.md"
    assert settings.config_file_used == str(cfg)


def test_config_without_md_file(tmp_path):
    cfg = _write(
        tmp_path / "noMdFile" / ".tp.toml",
        'binary = "terraform"\nplanFile = "plan.out"\n',
    )
    settings = load_settings(str(cfg), {})
    assert settings.is_set("mdFile") is False
    assert settings.get("planFile") == "plan.out"


def test_config_without_binary(tmp_path):
    cfg = _write(
        tmp_path / "duplicateBinaries" / ".tp.toml",
        'planFile = "plan.out"\nmdFile = "plan.md"\n',
    )
    settings = load_settings(str(cfg), {})
    assert settings.is_set("binary") is False
    assert settings.get("binary", "") == ""


def test_flags_override_config_and_none_is_unset(tmp_path):
    cfg = _write(tmp_path / ".tp.toml", 'planFile = "cfg.out"\nmdFile = "cfg.md"\n')
    settings = load_settings(str(cfg), {"planFile": "flag.out", "mdFile": None})
    assert settings.get("planFile") == "flag.out"
    assert settings.get("mdFile") == "cfg.md"
    assert settings.is_set("binary") is False


def test_env_between_flag_and_config():
    settings = Settings(
        flags={"mdFile": "flag.md"},
        config={"planFile": "cfg.out", "mdFile": "cfg.md"},
        environ={"PLANFILE": "env.out", "MDFILE": "env.md"},
    )
    assert settings.get("planFile") == "env.out"
    assert settings.get("mdFile") == "flag.md"


def test_empty_env_value_ignored():
    settings = Settings(config={"binary": "tofu"}, environ={"BINARY": ""})
    assert settings.get("binary") == "tofu"


def test_keys_case_insensitive():
    settings = Settings(config={"planFile": "plan.out"})
    assert settings.get("PLANFILE") == "plan.out"
    assert settings.is_set("planfile") is True


@pytest.mark.parametrize(
    "value, expected",
    [(True, True), (False, False), ("true", True), ("1", True), ("False", False),
     ("nope", False), (1, True), (0, False)],
)
def test_get_bool(value, expected):
    assert Settings(config={"verbose": value}).get_bool("verbose") is expected


def test_get_bool_unset_is_false():
    assert Settings().get_bool("verbose") is False


def test_find_config_file_order(tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    first.mkdir()
    _write(second / ".tp.toml", "")
    assert find_config_file([first, second]) == os.path.abspath(second / ".tp.toml")
    _write(first / ".tp.toml", "")
    assert find_config_file([first, second]) == os.path.abspath(first / ".tp.toml")


def test_find_config_file_none(tmp_path):
    (tmp_path / ".tp.toml").mkdir()
    assert find_config_file([tmp_path]) is None


def test_default_search_dirs(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    dirs = default_search_dirs()
    assert dirs[0] == "."
    assert os.path.basename(dirs[1]) == "gh-tp"
    assert dirs[2] == str(tmp_path)


def test_default_search_dirs_without_home(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.delenv("USERPROFILE", raising=False)
    assert default_search_dirs() == []


def test_load_settings_searches_cwd(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    cfg = _write(work / ".tp.toml", 'planFile = "p.out"\nverbose = true\n')
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.chdir(work)
    settings = load_settings(None, {})
    assert settings.config_file_used == os.path.abspath(cfg)
    assert settings.get("planFile") == "p.out"
    assert settings.get_bool("verbose") is True


def test_load_settings_no_config_found(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.chdir(tmp_path)
    settings = load_settings("", {"binary": "tofu"})
    assert settings.config_file_used is None
    assert settings.get("binary") == "tofu"
    assert settings.is_set("planFile") is False


def test_malformed_found_config_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    _write(tmp_path / ".tp.toml", "planFile = \n")
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ConfigFileError, match="While parsing config"):
        load_settings(None, {})


def test_malformed_explicit_config_is_tolerated(tmp_path):
    cfg = _write(tmp_path / "bad.toml", "planFile = \n")
    settings = load_settings(str(cfg), {})
    assert settings.config_file_used == str(cfg)
    assert settings.is_set("planFile") is False