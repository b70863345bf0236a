import logging
from typing import Dict, FrozenSet, List, Optional

from uploads_api.adapters.storage import ObjectStoreAdapter
from uploads_api.db_layer.file_record_service import FileRecordService
from uploads_api.errors import ConflictError, InvalidTransitionError, StoreError
from uploads_api.schemas import FileRecord, FileRecordCreate, FileStatus

logger = logging.getLogger(__name__)

# Legal moves between states. Re-applying the current state is always allowed.
TRANSITIONS: Dict[FileStatus, FrozenSet[FileStatus]] = {
    FileStatus.UPLOADING: frozenset({FileStatus.UPLOADED, FileStatus.FAILED}),
    FileStatus.UPLOADED: frozenset({FileStatus.ADDED}),
    FileStatus.FAILED: frozenset({FileStatus.UPLOADING}),
    FileStatus.ADDED: frozenset(),
}

# States a record may be created in. `added` has to be earned through `uploaded`.
INITIAL_STATES: FrozenSet[FileStatus] = frozenset(
    {FileStatus.UPLOADING, FileStatus.UPLOADED, FileStatus.FAILED}
)

MAX_TRANSITION_ATTEMPTS = 3


def can_transition(current: FileStatus, target: FileStatus) -> bool:
    current, target = FileStatus(current), FileStatus(target)
    return current == target or target in TRANSITIONS[current]


def validate_transition(current: FileStatus, target: FileStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is in the table."""
    if not can_transition(current, target):
        raise InvalidTransitionError(FileStatus(current).value, FileStatus(target).value)


class LifecycleController:
    """
    Owns the file-record state machine.

    Records are created, moved between states and deleted only through this
    class. With ``enforce_transitions`` off, any of the four states may be
    set from any other, which is the behaviour older clients rely on.
    """

    def __init__(
        self,
        records: FileRecordService,
        object_store: Optional[ObjectStoreAdapter] = None,
        bucket: Optional[str] = None,
        enforce_transitions: bool = True,
        cascade_delete_objects: bool = False,
    ):
        self.records = records
        self.object_store = object_store
        self.bucket = bucket
        self.enforce_transitions = enforce_transitions
        self.cascade_delete_objects = cascade_delete_objects

    def list(self) -> List[FileRecord]:
        return self.records.list_files()

    def get(self, file_id: str) -> FileRecord:
        return self.records.get_file(file_id)

    def create(self, payload: FileRecordCreate) -> FileRecord:
        if self.enforce_transitions and payload.status not in INITIAL_STATES:
            raise InvalidTransitionError("none", payload.status.value)
        return self.records.create_file(payload)

    def transition(
        self,
        file_id: str,
        target: FileStatus,
        expected_version: Optional[int] = None,
    ) -> FileRecord:
        """
        Move a record to ``target``.

        Setting the status a record already has is a no-op, so a retried
        request lands in the same final state as the first one. A stale
        ``expected_version`` is still a conflict, no-op or not.

        With transitions enforced, the write is pinned to the version the
        check was made against. If another writer gets in between, the
        record is re-read and re-checked, up to ``MAX_TRANSITION_ATTEMPTS``.
        """
        target = FileStatus(target)
        for attempt in range(1, MAX_TRANSITION_ATTEMPTS + 1):
            current = self.records.get_file(file_id)
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(file_id, expected_version, current.version)
            if current.status == target:
                logger.debug(f"File {file_id} already {target.value}")
                return current
            if not self.enforce_transitions:
                pinned = expected_version
            else:
                validate_transition(current.status, target)
                pinned = current.version

            try:
                updated = self.records.update_status(file_id, target, expected_version=pinned)
            except ConflictError:
                if expected_version is not None or attempt == MAX_TRANSITION_ATTEMPTS:
                    raise
                logger.info(f"File {file_id} changed during transition to {target.value}, re-checking")
                continue
            logger.info(f"File {file_id}: {current.status.value} -> {target.value} (v{updated.version})")
            return updated

    def delete(self, file_id: str, expected_version: Optional[int] = None) -> FileRecord:
        """
        Delete a record. Its bytes are removed too only when cascading is on.

        The record goes first. A failed byte delete after that is logged and
        leaves orphaned bytes behind rather than failing the request.
        """
        removed = self.records.delete_file(file_id, expected_version=expected_version)
        if not removed.storage_path:
            return removed

        if not (self.cascade_delete_objects and self.object_store and self.bucket):
            logger.warning(
                f"Deleted record {file_id}; bytes left at {self.bucket}/{removed.storage_path}"
            )
            return removed

        try:
            self.object_store.delete(self.bucket, removed.storage_path)
        except StoreError as e:
            logger.warning(
                f"Deleted record {file_id} but not its bytes at {self.bucket}/{removed.storage_path}: "
                f"{e.status_code} {e.detail}"
            )
        return removed
