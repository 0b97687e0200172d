from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from quickscan.files import FileRecord, FileStatus
from quickscan.storage import StorageKind


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    created_at: datetime
    is_active: bool


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: str
    password: str = Field(..., min_length=1)


class TokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AuthOut(BaseModel):
    user: UserOut
    token: str
    expires_at: datetime


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    filename: str
    file_size: int
    content_type: str
    created_at: datetime
    status: FileStatus
    storage_type: StorageKind
    download_url: str | None = None

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileOut":
        return cls.model_validate(record)


class UploadOut(FileOut):
    signed_url: str | None = None


class FileListOut(BaseModel):
    files: list[FileOut]
    total_count: int


class DownloadLinkOut(BaseModel):
    id: uuid.UUID
    filename: str
    download_url: str
    expires_at: datetime | None = None


class DeletedOut(BaseModel):
    id: uuid.UUID


class CleanupOut(BaseModel):
    removed: int
    reconciled: int


class HealthOut(BaseModel):
    status: str = "healthy"
    service: str
    version: str
    storage_type: StorageKind
