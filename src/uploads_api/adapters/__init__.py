"""
Adapter layer for the Uploads API.

Contains the object-store adapter that the upload orchestrator and the
lifecycle controller write through.
"""

from .storage import ObjectStoreAdapter

__all__ = ['ObjectStoreAdapter']
