"""
File record service for Uploads API NoSQL operations.
Create, read, status-update and delete of file metadata documents.
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from database.local import get_nosql_adapter
from uploads_api.errors import ConflictError, NotFoundError, PersistenceError
from uploads_api.schemas import FileRecord, FileRecordCreate, FileStatus

logger = logging.getLogger(__name__)

COLLECTION = 'file_records'


class FileRecordService:
    """Metadata store adapter for file records.

    Store failures come back as :class:`PersistenceError`; operations on a
    missing id raise :class:`NotFoundError`.
    """

    def __init__(self, db_path: str = "uploads.db"):
        self.db_path = db_path
        self.adapter = get_nosql_adapter(db_path)

    def list_files(self) -> List[FileRecord]:
        """All records, newest upload first."""
        try:
            documents = self.adapter.query_documents(COLLECTION, order_by='uploaded_at', descending=True)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error listing file records: {e}")
            raise PersistenceError("Failed to fetch files", detail=str(e)) from e
        return [FileRecord.model_validate(doc) for doc in documents]

    def get_file(self, file_id: str) -> FileRecord:
        try:
            document = self.adapter.get_document(COLLECTION, file_id)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error getting file record {file_id}: {e}")
            raise PersistenceError("Failed to fetch file", detail=str(e)) from e
        if document is None:
            raise NotFoundError(file_id)
        return FileRecord.model_validate(document)

    def create_file(self, payload: FileRecordCreate) -> FileRecord:
        """Persist a new record and return it with its store-assigned id."""
        record = FileRecord(id=uuid.uuid4().hex, version=1, **payload.model_dump())
        try:
            self.adapter.create_document(COLLECTION, record.to_document())
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error creating file record for {payload.name}: {e}")
            raise PersistenceError("Failed to save file metadata", detail=str(e)) from e
        logger.info(f"Created file record {record.id} ({record.name}, {record.status.value})")
        return record

    def update_status(
        self,
        file_id: str,
        status: FileStatus,
        expected_version: Optional[int] = None,
    ) -> FileRecord:
        """
        Overwrite the status of a record.

        Without ``expected_version`` this is last-writer-wins. With it, the
        write is a compare-and-swap against the stored version.
        """
        fields = {
            "status": FileStatus(status).value,
            "updated_at": datetime.now(timezone.utc).isoformat(timespec="microseconds"),
        }
        try:
            written = self.adapter.patch_document(COLLECTION, file_id, fields, expected_version=expected_version)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error updating status of {file_id}: {e}")
            raise PersistenceError("Failed to update file status", detail=str(e)) from e

        if not written:
            self._raise_missed_write(file_id, expected_version)
        return self.get_file(file_id)

    def delete_file(self, file_id: str, expected_version: Optional[int] = None) -> FileRecord:
        """Remove a record permanently and return what was removed."""
        record = self.get_file(file_id)
        try:
            deleted = self.adapter.delete_document(COLLECTION, file_id, expected_version=expected_version)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error deleting file record {file_id}: {e}")
            raise PersistenceError("Failed to delete file", detail=str(e)) from e

        if not deleted:
            self._raise_missed_write(file_id, expected_version)
        return record

    def count_files(self) -> int:
        try:
            return self.adapter.count_documents(COLLECTION)
        except (sqlite3.Error, ValueError) as e:
            logger.error(f"Error counting file records: {e}")
            raise PersistenceError("Failed to count files", detail=str(e)) from e

    def _raise_missed_write(self, file_id: str, expected_version: Optional[int]) -> None:
        """A keyed write touched no row: the record is gone or its version moved."""
        current = self.adapter.get_document(COLLECTION, file_id)
        if current is None:
            raise NotFoundError(file_id)
        raise ConflictError(file_id, expected_version, current.get("version"))


def get_file_record_service(db_path: str = "uploads.db") -> FileRecordService:
    """Get a file record service instance"""
    return FileRecordService(db_path)
