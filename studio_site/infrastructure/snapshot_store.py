# Copyright (c) 2025 Trae AI. All rights reserved.

import json
import os
import logging
import tempfile
from pathlib import Path
from studio_site.core.models import CatalogSnapshot


class SnapshotStore:
    """
    Reads and writes the on-disk JSON snapshot of the last catalog scan.
    Writes replace the whole file atomically.
    """

    def __init__(self, snapshot_path: Path):
        self.snapshot_path = Path(snapshot_path)
        self.logger = logging.getLogger(__name__)

    def _ensure_parent(self):
        if not self.snapshot_path.parent.exists():
            self.snapshot_path.parent.mkdir(parents=True, exist_ok=True)

    def load(self) -> CatalogSnapshot:
        if not self.snapshot_path.exists():
            return CatalogSnapshot()
        try:
            with open(self.snapshot_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return CatalogSnapshot.model_validate(data)
        except ValueError as e:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors
            self.logger.warning(f"Ignoring unreadable snapshot {self.snapshot_path}: {e}")
            return CatalogSnapshot()

    def save(self, snapshot: CatalogSnapshot):
        self._ensure_parent()
        payload = snapshot.model_dump(mode="json", by_alias=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.snapshot_path.parent, prefix=f".{self.snapshot_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.snapshot_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
