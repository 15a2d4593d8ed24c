"""Tests for configuration loading."""

from pathlib import Path

import pytest

from zet.config import DEFAULT_PREFIX, load_config


def test_defaults_to_production_dir(tmp_path: Path):
    config = load_config(env={}, home=tmp_path / "home", cwd=tmp_path)
    assert config.zettel_dir == tmp_path / "home" / "zettel2"
    assert config.default_prefix == DEFAULT_PREFIX
    assert config.editor is None
    assert not config.debug


@pytest.mark.parametrize("value", ["1", "true"])
def test_debug_uses_local_dir(tmp_path: Path, value: str):
    config = load_config(env={"ZET_DEBUG": value, "EDITOR": "nvim"}, home=tmp_path, cwd=tmp_path / "work")
    assert config.debug
    assert config.zettel_dir == tmp_path / "work" / "zettel"
    assert config.editor == "nvim"


def test_debug_requires_exact_value(tmp_path: Path):
    assert not load_config(env={"ZET_DEBUG": "yes"}, home=tmp_path, cwd=tmp_path).debug


def test_default_config_file(tmp_path: Path):
    config_file = tmp_path / ".config" / "zet" / "config.toml"
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        'zettel_dir = "~/notes"\ndefault_prefix = "idea"\neditor = "hx"\n', encoding="utf-8"
    )

    config = load_config(env={"EDITOR": "vim"}, home=tmp_path, cwd=tmp_path)

    assert config.zettel_dir == tmp_path / "notes"
    assert config.default_prefix == "idea"
    assert config.editor == "hx"
    assert config.state_dir == tmp_path / "notes" / ".zet"


def test_explicit_config_must_exist(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(config_path=tmp_path / "missing.toml", env={}, home=tmp_path, cwd=tmp_path)


def test_config_type_errors(tmp_path: Path):
    config_file = tmp_path / "zet.toml"
    config_file.write_text("default_prefix = 3\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(config_path=config_file, env={}, home=tmp_path, cwd=tmp_path)
