from typing import Optional

from fastapi import APIRouter, Depends, Path, Query, status

from uploads_api.dependencies import get_lifecycle
from uploads_api.lifecycle import LifecycleController
from uploads_api.schemas import (
    AckResponse,
    ErrorResponse,
    FileListResponse,
    FileRecordCreate,
    FileResponse,
    StatusUpdate,
)

router = APIRouter()

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.get("/files", response_model=FileListResponse, responses={500: {"model": ErrorResponse}})
def list_files(lifecycle: LifecycleController = Depends(get_lifecycle)):
    """List every file record, most recent upload first."""
    return FileListResponse(files=lifecycle.list())


@router.post(
    "/files",
    response_model=FileResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
def create_file(payload: FileRecordCreate, lifecycle: LifecycleController = Depends(get_lifecycle)):
    """
    Create a file record.

    The id is assigned here and returned in the response. A record usually
    starts out `uploading` and is moved on with `PATCH` once the bytes land.
    """
    return FileResponse(file=lifecycle.create(payload))


@router.get("/files/{file_id}", response_model=FileResponse, responses=ERROR_RESPONSES)
def get_file(
    file_id: str = Path(..., description="Id assigned when the record was created"),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    return FileResponse(file=lifecycle.get(file_id))


@router.patch("/files/{file_id}", response_model=FileResponse, responses=ERROR_RESPONSES)
def update_file_status(
    update: StatusUpdate,
    file_id: str = Path(..., description="Id assigned when the record was created"),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    """
    Set the status of a record.

    Re-sending the status a record already has changes nothing, so retries
    are safe. Pass `version` to fail with 409 if someone else got there first.
    """
    record = lifecycle.transition(file_id, update.status, expected_version=update.version)
    return FileResponse(file=record)


@router.delete("/files/{file_id}", response_model=AckResponse, responses=ERROR_RESPONSES)
def delete_file(
    file_id: str = Path(..., description="Id assigned when the record was created"),
    version: Optional[int] = Query(None, ge=1, description="Last-seen version of the record"),
    lifecycle: LifecycleController = Depends(get_lifecycle),
):
    """Delete a record. Its bytes stay in the bucket unless cascading is enabled."""
    lifecycle.delete(file_id, expected_version=version)
    return AckResponse()
