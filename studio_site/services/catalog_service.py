# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from pathlib import Path
from typing import List
from studio_site.core.config import Config
from studio_site.core.errors import InvalidPathError, ScanError
from studio_site.core.models import DirectoryNode, MediaEntry
from studio_site.core.scanner import Scanner


class MediaCatalog:
    """
    Answers "what media exists under category X?" and "what does the whole
    media tree look like?" by scanning the configured root on every call.
    """

    def __init__(self, config: Config):
        self.config = config
        self.root = Path(config.media_root)
        self.scanner = Scanner(
            config.image_extensions,
            config.video_extensions,
            public_prefix=config.public_prefix,
        )
        self.logger = logging.getLogger(__name__)

    def _resolve(self, relative_path: str):
        segments = self.scanner.split_relative(relative_path)
        target = self.root.joinpath(*segments)
        try:
            exists = target.exists()
        except OSError as e:
            # e.g. ENAMETOOLONG, which Path.exists() does not swallow
            raise InvalidPathError(relative_path, e.strerror or str(e)) from e
        # Lexically safe paths can still leave the root through a symlink
        if exists:
            root_resolved = self.root.resolve()
            resolved = target.resolve()
            if resolved != root_resolved and root_resolved not in resolved.parents:
                raise InvalidPathError(relative_path, "resolves outside media root")
        return target, segments

    def list_by_category(self, relative_path: str) -> List[MediaEntry]:
        target, segments = self._resolve(relative_path)
        try:
            entries = self.scanner.list_directory(target, segments)
        except OSError as e:
            self.logger.error(f"Failed to list category '{relative_path}': {e}")
            raise ScanError(target, e) from e
        self.logger.debug(f"Listed {len(entries)} entries in '{'/'.join(segments)}'")
        return entries

    def get_tree(self) -> DirectoryNode:
        if not self.root.is_dir():
            self.logger.warning(f"Media root not found: {self.root}")
            return DirectoryNode(name=self.root.name)
        try:
            children = self.scanner.walk_tree(self.root, [])
        except OSError as e:
            self.logger.error(f"Failed to build media tree: {e}")
            raise ScanError(self.root, e) from e
        return DirectoryNode(name=self.root.name, children=children)

    def resolve_file(self, relative_path: str) -> Path:
        """
        Maps a public relative path to the file it names.
        Raises InvalidPathError or FileNotFoundError.
        """
        target, segments = self._resolve(relative_path)
        if not segments or not target.is_file():
            raise FileNotFoundError(relative_path)
        return target

    def ensure_default_structure(self) -> List[Path]:
        created = []
        for category in self.config.default_categories:
            target, _ = self._resolve(category)
            if not target.exists():
                target.mkdir(parents=True, exist_ok=True)
                created.append(target)
        if created:
            self.logger.info(f"Created {len(created)} default category directories under {self.root}")
        return created
