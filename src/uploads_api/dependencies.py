"""FastAPI dependencies: hand routes the components built in `create_app`."""

from fastapi import Request

from uploads_api.adapters.storage import ObjectStoreAdapter
from uploads_api.config.settings import Settings
from uploads_api.lifecycle import LifecycleController
from uploads_api.services.upload_service import UploadService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_object_store(request: Request) -> ObjectStoreAdapter:
    return request.app.state.object_store


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_lifecycle(request: Request) -> LifecycleController:
    return request.app.state.lifecycle
