"""
JSON schemas for NoSQL document validation.
This module defines the schema for file-record documents and the validators
the adapter runs before every insert.
"""

from typing import Dict, Any
from enum import Enum

import jsonschema


class FileStatus(str, Enum):
    """Lifecycle states of an uploaded file"""
    UPLOADING = 'uploading'
    UPLOADED = 'uploaded'
    FAILED = 'failed'
    ADDED = 'added'


FILE_RECORD_JSON_SCHEMA = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "name": {"type": "string", "minLength": 1, "maxLength": 255},
        "size": {"type": "integer", "minimum": 0},
        "uploaded_at": {"type": "string", "format": "date-time"},
        "status": {"type": "string", "enum": [s.value for s in FileStatus]},
        "storage_path": {"type": ["string", "null"], "maxLength": 1024},
        "version": {"type": "integer", "minimum": 1},
        "updated_at": {"type": ["string", "null"], "format": "date-time"}
    },
    "required": ["id", "name", "size", "uploaded_at", "status", "version"],
    "additionalProperties": False
}


def validate_file_record_document(document: Dict[str, Any]) -> None:
    """Validate a file record document against the schema"""
    jsonschema.validate(document, FILE_RECORD_JSON_SCHEMA)


DOCUMENT_VALIDATORS = {
    'file_records': validate_file_record_document,
}
