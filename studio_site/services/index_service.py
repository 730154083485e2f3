# Copyright (c) 2025 Trae AI. All rights reserved.

import logging
from collections import defaultdict
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from studio_site.core.config import Config
from studio_site.core.errors import ScanError
from studio_site.core.models import CatalogSnapshot, CatalogStats, SnapshotRecord
from studio_site.core.scanner import Scanner
from studio_site.infrastructure.snapshot_store import SnapshotStore


class CatalogIndex:
    """
    Persisted-snapshot flavour of the catalog.

    Every read performs a full re-scan and overwrites the snapshot file, so
    answers always reflect the disk at the moment of the call. The file is an
    inspectable artifact of the last scan, not a cache.
    """

    def __init__(self, config: Config, store: Optional[SnapshotStore] = None):
        self.config = config
        self.root = Path(config.media_root)
        self.scanner = Scanner(
            config.image_extensions,
            config.video_extensions,
            public_prefix=config.public_prefix,
        )
        self.store = store or SnapshotStore(config.snapshot_path)
        self.logger = logging.getLogger(__name__)

    def scan(self) -> CatalogSnapshot:
        try:
            entries = self.scanner.scan(self.root)
        except OSError as e:
            self.logger.error(f"Snapshot scan of {self.root} failed: {e}")
            raise ScanError(self.root, e) from e

        categories = defaultdict(list)
        for entry in entries:
            categories[entry.category].append(entry.to_record())

        snapshot = CatalogSnapshot(
            images=dict(categories),
            last_updated=datetime.now(timezone.utc),
        )
        try:
            self.store.save(snapshot)
        except OSError as e:
            self.logger.error(f"Failed to write snapshot {self.store.snapshot_path}: {e}")
            raise ScanError(self.store.snapshot_path, e) from e

        self.logger.info(
            f"Snapshot rebuilt: {snapshot.total_files} files in {len(snapshot.images)} categories"
        )
        return snapshot

    # Reads always re-scan; see DESIGN.md for why this is kept.
    def read(self) -> CatalogSnapshot:
        return self.scan()

    def refresh(self) -> CatalogSnapshot:
        self.logger.info("Explicit snapshot refresh requested")
        return self.scan()

    def get_by_category(self, category: str) -> List[SnapshotRecord]:
        return self.scan().images.get(category.strip("/"), [])

    def get_by_path(self, relative_path: str) -> Optional[SnapshotRecord]:
        return self.scan().find(relative_path)

    def stats(self) -> CatalogStats:
        return self.scan().stats()

    def last_snapshot(self) -> CatalogSnapshot:
        """The snapshot as last written to disk, without scanning."""
        return self.store.load()
