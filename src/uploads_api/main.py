import logging
from textwrap import dedent
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from database.local import init_db
from uploads_api.adapters.storage import ObjectStoreAdapter
from uploads_api.config.settings import Settings
from uploads_api.db_layer.file_record_service import get_file_record_service
from uploads_api.errors import (
    FilesAPIError,
    handle_broad_exceptions,
    handle_files_api_error,
    handle_pydantic_validation_errors,
)
from uploads_api.lifecycle import LifecycleController
from uploads_api.routers.files import router as files_router
from uploads_api.routers.health import router as health_router
from uploads_api.routers.upload import router as upload_router
from uploads_api.s3.client import build_s3_client
from uploads_api.services.upload_service import UploadService

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create a FastAPI application."""
    settings = settings or Settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="Directory Uploads API",
        summary="Upload CSV files and track their import status",
        version="v1",
        description=dedent(
            """\
        Bytes go to the object store through `POST /v1/upload`. Metadata lives
        in `/v1/files` and moves through `uploading`, `uploaded`, `failed`
        and `added`.
        """
        ),
        docs_url="/",
        generate_unique_id_function=custom_generate_unique_id,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"Creating metadata store at {settings.db_path}")
    init_db(settings.db_path)

    object_store = ObjectStoreAdapter(build_s3_client(settings.store_config()))
    records = get_file_record_service(settings.db_path)

    app.state.settings = settings
    app.state.object_store = object_store
    app.state.upload_service = UploadService(object_store, max_bytes=settings.max_upload_bytes)
    app.state.lifecycle = LifecycleController(
        records,
        object_store=object_store,
        bucket=settings.s3_bucket_name,
        enforce_transitions=settings.enforce_transitions,
        cascade_delete_objects=settings.cascade_delete_objects,
    )

    app.include_router(files_router, prefix="/v1", tags=["files"])
    app.include_router(upload_router, prefix="/v1", tags=["upload"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(FilesAPIError, handle_files_api_error)
    app.add_exception_handler(RequestValidationError, handle_pydantic_validation_errors)
    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
