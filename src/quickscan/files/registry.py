from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from quickscan.exceptions import InternalError, NotFoundError

from .models import FileRecord, FileStatus

logger = logging.getLogger(__name__)

_LOCK_STRIPES = 16


class FileRegistry:
    """In-memory directory of live file records, keyed by id.

    Mutations on one id are serialized through a striped lock table; reads
    and listing work on snapshots and never block.
    """

    def __init__(
        self,
        *,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self._records: dict[uuid.UUID, FileRecord] = {}
        self._locks = [threading.Lock() for _ in range(_LOCK_STRIPES)]
        self._id_factory = id_factory
        self._clock = clock

    def _lock_for(self, file_id: uuid.UUID) -> threading.Lock:
        return self._locks[file_id.int % _LOCK_STRIPES]

    def create(self, **metadata: Any) -> FileRecord:
        """Insert a record under a fresh id.

        One id collision is retried; a second one means the id source is
        broken and raises ``InternalError``.
        """
        metadata.setdefault("created_at", self._clock())
        for _ in range(2):
            file_id = self._id_factory()
            with self._lock_for(file_id):
                if file_id in self._records:
                    logger.warning("File id collision on %s", file_id)
                    continue
                record = FileRecord(id=file_id, **metadata)
                self._records[file_id] = record
                return record
        raise InternalError("Could not allocate a unique file id")

    def get(self, file_id: uuid.UUID) -> FileRecord:
        record = self._records.get(file_id)
        if record is None or record.status is FileStatus.DELETED:
            raise NotFoundError(f"File {file_id} not found", context={"file_id": str(file_id)})
        return record

    def list(self) -> list[FileRecord]:
        return [r for r in list(self._records.values()) if r.status is FileStatus.UPLOADED]

    def find_by_backend_key(self, key: str) -> FileRecord | None:
        for record in list(self._records.values()):
            if record.backend_key == key:
                return record
        return None

    def mark_deleted(self, file_id: uuid.UUID) -> FileRecord:
        with self._lock_for(file_id):
            record = self._records.pop(file_id, None)
            if record is None:
                raise NotFoundError(f"File {file_id} not found", context={"file_id": str(file_id)})
            record.status = FileStatus.DELETED
        return record

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, file_id: object) -> bool:
        return file_id in self._records
