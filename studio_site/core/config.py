# Copyright (c) 2025 Trae AI. All rights reserved.

import os
import yaml
from pathlib import Path
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field
from .errors import ConfigError

DEFAULT_CATEGORIES = [
    "heroes/home",
    "heroes/gallery",
    "heroes/about",
    "contact/backgrounds",
    "gallery/portraits",
    "gallery/wides",
    "about/approach",
    "home/intro",
    "home/video",
    "home/homepage_video",
    "home/portfolio_slideshow/portraits",
    "home/portfolio_slideshow/landscapes",
]

# (environment variable, dotted config key)
ENV_OVERRIDES = [
    ("STUDIO_ENV", "environment"),
    ("PORT", "server_port"),
    ("MEDIA_ROOT", "media_root"),
    ("SMTP_HOST", "smtp.host"),
    ("SMTP_PORT", "smtp.port"),
    ("SMTP_SECURE", "smtp.secure"),
    ("SMTP_USER", "smtp.user"),
    ("SMTP_PASS", "smtp.password"),
    ("EMAIL_FROM", "smtp.sender"),
    ("EMAIL_TO", "smtp.recipient"),
]


class SmtpConfig(BaseModel):
    host: Optional[str] = None
    port: int = 587
    secure: bool = False  # implicit TLS (port 465); otherwise STARTTLS when offered
    user: Optional[str] = None
    password: Optional[str] = None
    sender: str = "noreply@theweddingshade.com"
    recipient: Optional[str] = None
    timeout_seconds: float = 10.0


class Config(BaseModel):
    media_root: Path
    snapshot_path: Path = Path("data/images.json")
    public_prefix: str = "/media"
    image_extensions: List[str] = [".jpg", ".jpeg", ".png", ".webp", ".gif"]
    video_extensions: List[str] = [".mp4", ".webm", ".mov"]
    default_categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    media_cache_seconds: int = 3600
    optimized_cache_seconds: int = 31536000
    environment: str = "development"
    server_host: str = "0.0.0.0"
    server_port: int = 5000
    log_file: Optional[Path] = None
    verbose: bool = False
    studio_name: str = "The Wedding Shade"
    smtp: SmtpConfig = Field(default_factory=SmtpConfig)

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def load(cls, path: str = "config.yaml", environ: Optional[Dict[str, str]] = None) -> "Config":
        """
        Load config from YAML, then apply environment variable overrides.
        The file may be absent when MEDIA_ROOT is provided via the environment.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        config_file = Path(path)
        if config_file.exists():
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ConfigError(f"Invalid configuration in {path}: top level must be a mapping")
        elif "MEDIA_ROOT" not in environ:
            raise ConfigError(f"Config file not found: {path} (and MEDIA_ROOT is not set)")

        for env_name, key in ENV_OVERRIDES:
            value = environ.get(env_name)
            if value is None or value == "":
                continue
            target = data
            *parents, leaf = key.split(".")
            for parent in parents:
                child = target.get(parent)
                if not isinstance(child, dict):
                    child = {}
                    target[parent] = child
                target = child
            target[leaf] = value

        try:
            return cls(**data)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    def missing_required(self) -> List[str]:
        """Names of settings the contact relay cannot work without."""
        required = {
            "SMTP_HOST": self.smtp.host,
            "SMTP_USER": self.smtp.user,
            "SMTP_PASS": self.smtp.password,
            "EMAIL_TO": self.smtp.recipient,
        }
        return [name for name, value in required.items() if not value]

    def check_startup(self):
        missing = self.missing_required()
        if missing and self.is_production:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")

    def safe_dump(self) -> Dict[str, Any]:
        data = self.model_dump(mode="json")
        if data["smtp"].get("password"):
            data["smtp"]["password"] = "********"
        return data
