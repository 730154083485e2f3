# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
import os
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote
from .errors import InvalidPathError
from .models import DirectoryNode, FileNode, MediaEntry, MediaKind

logger = logging.getLogger(__name__)


def _sort_key(name: str):
    return (name.lower(), name)


def _url_safe(name: str) -> bool:
    # Undecodable bytes come back from os.scandir as lone surrogates
    try:
        name.encode("utf-8")
    except UnicodeEncodeError:
        logger.warning(f"Skipping file with non UTF-8 name: {name!r}")
        return False
    return True


class Scanner:
    """
    Classifies files by extension and turns on-disk paths under the media
    root into MediaEntry values and tree nodes.
    """

    def __init__(
        self,
        image_extensions: List[str],
        video_extensions: List[str],
        public_prefix: str = "/media",
    ):
        self.image_extensions = {ext.lower() for ext in image_extensions}
        self.video_extensions = {ext.lower() for ext in video_extensions}
        self.public_prefix = "/" + public_prefix.strip("/") if public_prefix.strip("/") else ""

    def classify(self, name: str) -> Optional[MediaKind]:
        ext = os.path.splitext(name)[1].lower()
        if ext in self.video_extensions:
            return MediaKind.VIDEO
        if ext in self.image_extensions:
            return MediaKind.IMAGE
        return None

    def is_listable(self, name: str) -> bool:
        return self.classify(name) is not None and _url_safe(name)

    def build_url(self, segments: List[str]) -> str:
        return self.public_prefix + "/" + "/".join(quote(seg, safe="") for seg in segments)

    def split_relative(self, relative_path: str) -> List[str]:
        """
        Lexically normalizes a client-supplied relative path into segments.
        Raises InvalidPathError without touching the filesystem if the path
        could escape the root. Only "/" separates segments, so a backslash
        or a colon is part of a file name.
        """
        raw = relative_path or ""
        if "\x00" in raw:
            raise InvalidPathError(raw, "contains NUL byte")

        stripped = raw.strip("/")
        if not stripped:
            return []
        normalized = posixpath.normpath(stripped)
        if normalized == ".":
            return []
        if normalized == ".." or normalized.startswith("../"):
            raise InvalidPathError(raw)
        return normalized.split("/")

    def entry_for(self, path: Path, segments: List[str]) -> MediaEntry:
        kind = self.classify(path.name)
        stat = path.stat()
        return MediaEntry(
            filename=path.name,
            relative_path="/".join(segments),
            url=self.build_url(segments),
            kind=kind,
            extension=path.suffix.lower(),
            size_bytes=stat.st_size,
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    def list_directory(self, directory: Path, segments: List[str]) -> List[MediaEntry]:
        """
        Lists the recognized files directly inside directory, sorted by name.
        """
        if not directory.is_dir():
            return []

        names = []
        with os.scandir(directory) as it:
            for entry in it:
                if entry.is_file(follow_symlinks=False) and self.is_listable(entry.name):
                    names.append(entry.name)

        return [
            self.entry_for(directory / name, segments + [name])
            for name in sorted(names, key=_sort_key)
        ]

    def walk_tree(self, directory: Path, segments: List[str]) -> List:
        """
        Recursively builds tree nodes for the contents of directory.
        """
        nodes = []
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: _sort_key(e.name))

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if not _url_safe(entry.name):
                    continue
                nodes.append(
                    DirectoryNode(
                        name=entry.name,
                        children=self.walk_tree(Path(entry.path), segments + [entry.name]),
                    )
                )
            elif entry.is_file(follow_symlinks=False) and self.is_listable(entry.name):
                nodes.append(FileNode(name=entry.name, url=self.build_url(segments + [entry.name])))
        return nodes

    def scan(self, root_path: Path) -> List[MediaEntry]:
        """
        Recursively collects every recognized file under root_path.
        """
        media_entries = []
        if not root_path.exists():
            return media_entries

        for root, dirs, files in os.walk(root_path, onerror=_raise):
            dirs[:] = sorted((d for d in dirs if _url_safe(d)), key=_sort_key)
            rel = Path(root).relative_to(root_path)
            segments = list(rel.parts)
            for file in sorted(files, key=_sort_key):
                path = Path(root) / file
                if self.is_listable(file) and not path.is_symlink():
                    media_entries.append(self.entry_for(path, segments + [file]))
        return media_entries


def _raise(error: OSError):
    raise error
