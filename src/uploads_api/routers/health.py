import logging

from fastapi import APIRouter, Depends

from uploads_api.adapters.storage import ObjectStoreAdapter
from uploads_api.config.settings import Settings
from uploads_api.dependencies import get_app_settings, get_lifecycle, get_object_store
from uploads_api.errors import FilesAPIError
from uploads_api.lifecycle import LifecycleController

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
def health_check(
    settings: Settings = Depends(get_app_settings),
    lifecycle: LifecycleController = Depends(get_lifecycle),
    object_store: ObjectStoreAdapter = Depends(get_object_store),
):
    """
    Health check endpoint for monitoring API status and component readiness.

    Returns status of the metadata store and the object-store bucket along
    with the deployment mode.
    """
    health_status = {
        "status": "ok",
        "deployment_mode": settings.deployment_mode,
        "components": {
            "api": "ready",
            "database": "initializing",
            "object_store": "initializing",
        },
        "ready": False,
    }

    try:
        lifecycle.records.count_files()
        health_status["components"]["database"] = "ready"
    except FilesAPIError as e:
        logger.warning(f"Metadata store not ready: {e.detail}")
        health_status["components"]["database"] = f"error: {e.detail or e.message}"
        health_status["status"] = "degraded"

    try:
        object_store.check_bucket(settings.s3_bucket_name)
        health_status["components"]["object_store"] = "ready"
    except FilesAPIError as e:
        health_status["components"]["object_store"] = f"error: {e.detail or e.message}"
        health_status["status"] = "degraded"

    health_status["ready"] = all(value == "ready" for value in health_status["components"].values())
    return health_status
