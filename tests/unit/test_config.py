# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
import yaml
from pathlib import Path
from unittest.mock import MagicMock
from studio_site.core.config import Config, DEFAULT_CATEGORIES
from studio_site.core.errors import ConfigError
from studio_site.server.app import Server


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump({
        "media_root": str(tmp_path / "media"),
        "snapshot_path": str(tmp_path / "data" / "images.json"),
        "server_port": 5050,
        "smtp": {"host": "smtp.example.com", "user": "mailer"},
    }), encoding="utf-8")
    return path


def test_load_yaml_with_defaults(config_file, tmp_path):
    config = Config.load(str(config_file), environ={})

    assert config.media_root == tmp_path / "media"
    assert config.server_port == 5050
    assert config.public_prefix == "/media"
    assert ".mp4" in config.video_extensions
    assert config.default_categories == DEFAULT_CATEGORIES
    assert config.smtp.port == 587
    assert config.environment == "development"


def test_environment_overrides_yaml(config_file):
    config = Config.load(str(config_file), environ={
        "PORT": "8080",
        "SMTP_PASS": "secret",
        "SMTP_SECURE": "true",
        "EMAIL_TO": "bookings@theweddingshade.com",
        "STUDIO_ENV": "production",
    })

    assert config.server_port == 8080
    assert config.smtp.password == "secret"
    assert config.smtp.secure is True
    assert config.smtp.host == "smtp.example.com"
    assert config.is_production


def test_missing_file_requires_media_root(tmp_path):
    with pytest.raises(ConfigError):
        Config.load(str(tmp_path / "missing.yaml"), environ={})

    config = Config.load(str(tmp_path / "missing.yaml"), environ={"MEDIA_ROOT": str(tmp_path)})
    assert config.media_root == Path(str(tmp_path))


def test_invalid_values_raise_config_error(config_file):
    with pytest.raises(ConfigError):
        Config.load(str(config_file), environ={"PORT": "not-a-port"})


@pytest.mark.parametrize("content", ["- media_root\n- other\n", "just a string\n"])
def test_non_mapping_yaml_raises_config_error(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        Config.load(str(path), environ={"MEDIA_ROOT": str(tmp_path)})


def test_missing_required_and_startup_check(tmp_path):
    config = Config(media_root=tmp_path)
    assert config.missing_required() == ["SMTP_HOST", "SMTP_USER", "SMTP_PASS", "EMAIL_TO"]
    config.check_startup()  # development tolerates missing SMTP settings

    config.environment = "production"
    with pytest.raises(ConfigError, match="SMTP_HOST"):
        config.check_startup()


def test_safe_dump_masks_password(tmp_path):
    config = Config(media_root=tmp_path)
    config.smtp.password = "secret"

    assert config.safe_dump()["smtp"]["password"] == "********"
    assert config.smtp.password == "secret"


def test_server_refuses_to_start_half_configured(tmp_path):
    config = Config(media_root=tmp_path / "media", environment="production", default_categories=[])

    with pytest.raises(ConfigError):
        Server(config=config, mailer=MagicMock())
