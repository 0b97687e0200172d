from __future__ import annotations

import uuid
from urllib.parse import quote

from fastapi import APIRouter, File, Query, UploadFile, status
from fastapi.responses import RedirectResponse, Response

from quickscan.storage import StorageKind

from ..dependencies import Credential, CurrentUser, Files
from ..envelope import ApiResponse, ok
from ..schemas import CleanupOut, DeletedOut, DownloadLinkOut, FileListOut, FileOut, UploadOut

router = APIRouter(tags=["files"])


@router.post("/upload", response_model=ApiResponse[UploadOut])
async def upload_file(
    credential: Credential,
    files: Files,
    file: UploadFile = File(...),
):
    # One byte past the limit is enough to report the upload as too large.
    data = await file.read(files.settings.max_upload_bytes + 1)
    result = await files.upload(credential, file.filename, file.content_type, data)
    out = UploadOut(**FileOut.from_record(result.record).model_dump(), signed_url=result.signed_url)
    return ok(out, "File uploaded successfully")


@router.get("/files", response_model=ApiResponse[FileListOut])
async def list_files(credential: Credential, files: Files):
    records = await files.list_files(credential)
    out = FileListOut(files=[FileOut.from_record(r) for r in records], total_count=len(records))
    return ok(out, f"Found {len(records)} files")


@router.get("/files/{file_id}/download")
async def download_file(
    file_id: uuid.UUID,
    credential: Credential,
    files: Files,
    redirect: bool = Query(False, description="Redirect to a signed URL when the backend offers one"),
):
    if redirect and files.storage.kind is StorageKind.REMOTE:
        _, link = await files.download_link(credential, file_id)
        return RedirectResponse(link.url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)

    record, data = await files.download(credential, file_id)
    return Response(
        content=data,
        media_type=record.content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(record.filename)}",
        },
    )


@router.get("/files/{file_id}/url", response_model=ApiResponse[DownloadLinkOut])
async def get_download_url(file_id: uuid.UUID, credential: Credential, files: Files):
    record, link = await files.download_link(credential, file_id)
    out = DownloadLinkOut(
        id=record.id,
        filename=record.filename,
        download_url=link.url,
        expires_at=link.expires_at,
    )
    return ok(out, "Download URL generated")


@router.delete("/files/{file_id}", response_model=ApiResponse[DeletedOut])
async def delete_file(file_id: uuid.UUID, credential: Credential, files: Files):
    record = await files.delete(credential, file_id)
    return ok(DeletedOut(id=record.id), "File deleted successfully")


@router.post("/files/cleanup", response_model=ApiResponse[CleanupOut])
async def cleanup_files(user: CurrentUser, credential: Credential, files: Files):
    # Anonymous calls are rejected by CurrentUser.
    report = await files.cleanup(credential)
    return ok(
        CleanupOut(removed=report.removed, reconciled=report.reconciled),
        f"Removed {report.removed} expired files",
    )
