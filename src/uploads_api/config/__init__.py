"""
Configuration management for the Uploads API.

Contains the Pydantic settings and the explicit store configuration that is
passed into the adapters at startup.
"""

from .settings import Settings, StoreConfig, get_settings

__all__ = ['Settings', 'StoreConfig', 'get_settings']
