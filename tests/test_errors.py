import pytest

from ghtp.errors import (
    CONFIG_NAME,
    BinaryNotFoundError,
    ConfigValidationError,
    FilePathError,
    OperationInterrupted,
    TpError,
    build_multiple_binaries_found_error,
    build_no_binary_found_error,
)


def test_operation_interrupted_message():
    err = OperationInterrupted()
    assert str(err) == "operation interrupted by user"
    assert isinstance(err, TpError)


def test_file_path_error_keeps_path():
    err = FilePathError("bad name", "../x")
    assert err.path == "../x"
    assert str(err) == "bad name"
    with pytest.raises(ValueError):
        raise err


def test_config_validation_error_keeps_message():
    message = "validation failed: Field: Binary, Error: oneof, Param: terraform tofu"
    err = ConfigValidationError(message)
    assert str(err) == message
    assert isinstance(err, ValueError)


def test_no_binary_without_config():
    err = build_no_binary_found_error(None)
    assert isinstance(err, BinaryNotFoundError)
    message = str(err)
    assert message.startswith("could not find 'tofu' or 'terraform' in your PATH")
    assert CONFIG_NAME in message
    assert "not set in" not in message


def test_no_binary_with_missing_config_path(tmp_path):
    missing = tmp_path / "absent.toml"
    message = str(build_no_binary_found_error(str(missing)))
    assert str(missing) not in message
    assert "Please install one" in message


def test_no_binary_with_existing_config(tmp_path):
    cfg = tmp_path / CONFIG_NAME
    cfg.write_text("binary = ''\n")
    message = str(build_no_binary_found_error(str(cfg)))
    assert message.endswith(f" and 'binary' not set in {cfg}")


def test_multiple_binaries_without_config():
    err = build_multiple_binaries_found_error(["tofu", "terraform"], "")
    message = str(err)
    assert message.startswith("found both tofu and terraform in your PATH")
    assert f"create {CONFIG_NAME}" in message


def test_multiple_binaries_with_existing_config(tmp_path):
    cfg = tmp_path / CONFIG_NAME
    cfg.write_text("")
    message = str(build_multiple_binaries_found_error(["tofu", "terraform"], str(cfg)))
    assert message.endswith(f"set the 'binary' parameter in {cfg}")