# Copyright (c) 2025 Trae AI. All rights reserved.

from datetime import date, datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class MediaKind(Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaEntry(BaseModel):
    """
    Represents a single recognized media file, as seen at scan time.
    """

    model_config = ConfigDict(frozen=True)

    filename: str
    relative_path: str  # slash-separated, relative to the media root
    url: str
    kind: MediaKind
    extension: str
    size_bytes: int = 0
    last_modified: datetime

    @property
    def category(self) -> str:
        head, _, _ = self.relative_path.rpartition("/")
        return head

    def to_list_item(self) -> "MediaListItem":
        return MediaListItem(filename=self.filename, url=self.url, type=self.kind)

    def to_record(self) -> "SnapshotRecord":
        return SnapshotRecord(
            filename=self.filename,
            path=self.relative_path,
            url=self.url,
            size=self.size_bytes,
            last_modified=self.last_modified,
            type=self.kind,
            extension=self.extension,
        )


class MediaListItem(BaseModel):
    filename: str
    url: str
    type: MediaKind


class SnapshotRecord(BaseModel):
    """
    One entry in the persisted snapshot file and the /api/database responses.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    path: str
    url: str
    size: int
    last_modified: datetime
    type: MediaKind
    extension: str


class FileNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["file"] = "file"
    name: str
    url: str


class DirectoryNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["dir"] = "dir"
    name: str
    children: List["MediaTreeNode"] = Field(default_factory=list)


MediaTreeNode = Annotated[Union[FileNode, DirectoryNode], Field(discriminator="type")]
DirectoryNode.model_rebuild()


class MediaListResult(BaseModel):
    success: Literal[True] = True
    items: List[MediaListItem] = Field(default_factory=list)


class MediaTreeResult(BaseModel):
    success: Literal[True] = True
    tree: List[MediaTreeNode] = Field(default_factory=list)


class CatalogStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_categories: int = 0
    total_images: int = 0
    total_videos: int = 0
    total_files: int = 0
    total_size: int = 0
    last_updated: Optional[datetime] = None


class CatalogSnapshot(BaseModel):
    """
    Category -> entries mapping produced by one full scan of the media root.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    images: Dict[str, List[SnapshotRecord]] = Field(default_factory=dict)
    last_updated: Optional[datetime] = None

    @property
    def total_files(self) -> int:
        return sum(len(records) for records in self.images.values())

    def find(self, relative_path: str) -> Optional[SnapshotRecord]:
        wanted = relative_path.strip("/")
        for records in self.images.values():
            for record in records:
                if record.path == wanted:
                    return record
        return None

    def stats(self) -> CatalogStats:
        stats = CatalogStats(
            total_categories=len(self.images),
            last_updated=self.last_updated,
        )
        for records in self.images.values():
            for record in records:
                stats.total_size += record.size
                if record.type == MediaKind.VIDEO:
                    stats.total_videos += 1
                else:
                    stats.total_images += 1
        stats.total_files = stats.total_images + stats.total_videos
        return stats


class ContactSubmission(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True
    )

    name: str = Field(min_length=1)
    email: EmailStr
    message: str = Field(min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    event_category: Optional[str] = None
    event_type: Optional[str] = None
    event_date_start: Optional[date] = None
    event_date_end: Optional[date] = None

    @field_validator(
        "phone", "location", "event_category", "event_type",
        "event_date_start", "event_date_end",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("name", "event_category")
    @classmethod
    def _single_line(cls, value):
        # Both end up in the Subject header
        if value is not None and ("\r" in value or "\n" in value):
            raise ValueError("must not contain line breaks")
        return value

    @field_validator("event_date_end")
    @classmethod
    def _check_date_range(cls, value, info):
        start = info.data.get("event_date_start")
        if value is not None and start is not None and value < start:
            raise ValueError("end date must not be before start date")
        return value


class DeliveryReceipt(BaseModel):
    message_id: str
