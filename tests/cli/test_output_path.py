from datetime import datetime
from pathlib import Path
from unittest.mock import patch

from treemerge.cli.output_path import (
    DEFAULT_OUTPUT_DIRECTORY,
    default_output_name,
    prepare_output_directory,
    resolve_output,
)

NOW = datetime(2024, 5, 1, 9, 30, 0)


def test_default_output_name():
    assert default_output_name("Shop.Api", NOW) == "Shop.Api_2024-05-01_09-30-00.txt"


def test_prepare_creates_nested_directory(tmp_path):
    target = tmp_path / "out" / "nested"
    assert prepare_output_directory(target) == target
    assert target.is_dir()


def test_prepare_existing_directory(tmp_path):
    assert prepare_output_directory(tmp_path) == tmp_path


def test_prepare_falls_back_to_cwd(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    with patch.object(Path, "mkdir", side_effect=PermissionError(13, "Permission denied")):
        result = prepare_output_directory(Path("/root/forbidden"))

    assert result == Path.cwd()
    err = capsys.readouterr().err
    assert "Warning: Could not create directory /root/forbidden" in err
    assert "current directory will be used instead" in err


def test_resolve_explicit_file():
    assert resolve_output(Path("snapshot.txt"), None, "Shop", NOW) == Path("snapshot.txt")


def test_resolve_stdout():
    assert resolve_output(Path("-"), Path("ignored"), "Shop", NOW) is None


def test_resolve_default_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = resolve_output(None, None, "Shop", NOW)
    assert result == DEFAULT_OUTPUT_DIRECTORY / "Shop_2024-05-01_09-30-00.txt"
    assert (tmp_path / "merged_projects").is_dir()


def test_resolve_custom_directory(tmp_path):
    result = resolve_output(None, tmp_path / "snapshots", "Shop", NOW)
    assert result == tmp_path / "snapshots" / "Shop_2024-05-01_09-30-00.txt"
