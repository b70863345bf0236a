"""Directory admin uploads service: CSV bytes in object storage, metadata in a document store."""

__version__ = "0.1.0"
