from .upload_service import (
    UploadResult,
    UploadService,
    generate_unique_file_path,
    validate_csv_upload,
)

__all__ = ['UploadResult', 'UploadService', 'generate_unique_file_path', 'validate_csv_upload']
