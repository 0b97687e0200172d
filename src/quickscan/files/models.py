from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from quickscan.storage import StorageKind


class FileStatus(StrEnum):
    UPLOADED = "uploaded"
    DELETED = "deleted"


@dataclass
class FileRecord:
    id: uuid.UUID
    filename: str
    file_size: int
    content_type: str
    created_at: datetime
    storage_type: StorageKind
    backend_key: str = field(repr=False)
    download_url: str | None = None
    status: FileStatus = FileStatus.UPLOADED


@dataclass(frozen=True)
class UploadResult:
    record: FileRecord
    signed_url: str | None = None


@dataclass(frozen=True)
class DownloadLink:
    url: str
    # None when the link does not expire (internal streaming path).
    expires_at: datetime | None = None


@dataclass(frozen=True)
class CleanupReport:
    removed: int = 0
    reconciled: int = 0
