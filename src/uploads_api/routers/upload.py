from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from uploads_api.dependencies import get_upload_service
from uploads_api.errors import ValidationError
from uploads_api.schemas import ErrorResponse, UploadResponse
from uploads_api.services.upload_service import UploadService

router = APIRouter()


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_file(
    file: Optional[UploadFile] = File(None, description="Bytes to store"),
    path: Optional[str] = Form(None, description="Destination path inside the bucket"),
    bucket: Optional[str] = Form(None, description="Destination bucket"),
    upload_service: UploadService = Depends(get_upload_service),
):
    """
    Write a file's bytes to the object store.

    No metadata is recorded. Create or update the file record separately
    once this call returns.
    """
    if file is None or not path or not bucket:
        raise ValidationError("Missing required fields")

    upload_service.check_size(file.size)
    data = await file.read()
    result = upload_service.upload(data, bucket, path, content_type=file.content_type)
    return UploadResponse(bucket=result.bucket, path=result.path, size=result.size)
