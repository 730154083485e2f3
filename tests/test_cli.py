# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import yaml
from typer.testing import CliRunner
from studio_site.cli.main import app

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path, media_root):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "media_root": str(media_root),
        "snapshot_path": str(tmp_path / "data" / "images.json"),
        "default_categories": ["heroes/home", "gallery/portraits"],
    }), encoding="utf-8")
    return str(path)


def test_list_command(config_path, make_file):
    make_file("gallery/portraits/a.jpg")
    make_file("gallery/portraits/b.mp4")

    result = runner.invoke(app, ["list", "gallery/portraits", "--config-path", config_path])

    assert result.exit_code == 0
    assert "a.jpg" in result.output
    assert "Found 2 files" in result.output


def test_list_command_rejects_traversal(config_path):
    result = runner.invoke(app, ["list", "../etc", "--config-path", config_path])

    assert result.exit_code == 2


def test_tree_command(config_path, make_file):
    make_file("home/video/clip.mp4")

    result = runner.invoke(app, ["tree", "--config-path", config_path])

    assert result.exit_code == 0
    assert "clip.mp4" in result.output


def test_refresh_and_stats(config_path, tmp_path, make_file):
    make_file("gallery/portraits/a.jpg")

    result = runner.invoke(app, ["refresh", "--config-path", config_path])
    assert result.exit_code == 0
    assert (tmp_path / "data" / "images.json").exists()

    result = runner.invoke(app, ["stats", "--config-path", config_path])
    assert result.exit_code == 0
    assert "Images" in result.output


def test_init_command(config_path, media_root):
    result = runner.invoke(app, ["init", "--config-path", config_path])

    assert result.exit_code == 0
    assert (media_root / "heroes" / "home").is_dir()
    assert (media_root / "gallery" / "portraits").is_dir()


def test_missing_config(tmp_path, monkeypatch):
    monkeypatch.delenv("MEDIA_ROOT", raising=False)

    result = runner.invoke(app, ["tree", "--config-path", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1
