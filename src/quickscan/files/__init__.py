from .models import CleanupReport, DownloadLink, FileRecord, FileStatus, UploadResult
from .registry import FileRegistry
from .service import FileService, normalize_content_type
from .settings import FileSettings, get_file_settings

__all__ = [
    "CleanupReport",
    "DownloadLink",
    "FileRecord",
    "FileRegistry",
    "FileService",
    "FileSettings",
    "FileStatus",
    "UploadResult",
    "get_file_settings",
    "normalize_content_type",
]
