"""
Uploads API Database Layer

Document-based operations on file metadata records.
"""

from .file_record_service import FileRecordService, get_file_record_service

__all__ = ['FileRecordService', 'get_file_record_service']
