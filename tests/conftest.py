# Copyright (c) 2025 Trae AI. All rights reserved.

import pytest
from pathlib import Path
from unittest.mock import MagicMock
from studio_site.core.config import Config
from studio_site.services.catalog_service import MediaCatalog
from studio_site.services.index_service import CatalogIndex
from studio_site.server.app import Server

@pytest.fixture
def media_root(tmp_path):
    root = tmp_path / "media"
    root.mkdir()
    return root

@pytest.fixture
def make_file(media_root):
    def _make(rel_path: str, data: bytes = b"data") -> Path:
        path = media_root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path
    return _make

@pytest.fixture
def config(tmp_path, media_root):
    return Config(
        media_root=media_root,
        snapshot_path=tmp_path / "data" / "images.json",
        default_categories=[],
    )

@pytest.fixture
def catalog(config):
    return MediaCatalog(config)

@pytest.fixture
def index(config):
    return CatalogIndex(config)

@pytest.fixture
def mailer():
    mock = MagicMock()
    mock.send.return_value = "<abc123@theweddingshade.com>"
    return mock

@pytest.fixture
def server(config, mailer):
    return Server(config=config, mailer=mailer)

@pytest.fixture
def client(server):
    return server.app.test_client()
