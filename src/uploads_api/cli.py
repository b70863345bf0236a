# cli.py
import logging

import click
import uvicorn

from database.local import init_db as init_metadata_store
from uploads_api.client import FilesAPIClient, FilesAPIClientError, MetadataStepError
from uploads_api.config.settings import get_settings
from uploads_api.errors import ValidationError
from uploads_api.schemas import FileStatus

logger = logging.getLogger(__name__)

api_url_option = click.option(
    "--api-url", default="http://localhost:8000", show_default=True, help="Base URL of a running Uploads API"
)


@click.group()
def cli():
    """CLI commands for the Uploads API"""
    logging.basicConfig(level=get_settings().log_level)


@cli.command()
def show_config():
    """Show current configuration"""
    settings = get_settings()

    click.echo("Current Configuration:")
    click.echo(f"  Deployment Mode: {settings.deployment_mode}")
    click.echo(f"  AWS Region: {settings.aws_region}")
    click.echo(f"  Store URL: {settings.store_url or '(provider default)'}")
    click.echo(f"  S3 Bucket: {settings.s3_bucket_name}")
    click.echo(f"  Database: {settings.db_path}")
    click.echo(f"  Enforce Transitions: {settings.enforce_transitions}")
    click.echo(f"  Cascade Delete: {settings.cascade_delete_objects}")
    click.echo(f"  Max Upload: {settings.max_upload_bytes} bytes")


@cli.command()
@click.option("--db-path", default=None, help="SQLite file; defaults to DB_PATH")
def init_db(db_path):
    """Create the metadata collections"""
    db_path = db_path or get_settings().db_path
    init_metadata_store(db_path)
    click.echo(f"Metadata store ready at {db_path}")


@cli.command()
@click.option("--host", default="0.0.0.0", help="API host address")
@click.option("--port", default=8000, type=int, help="API port")
@click.option("--reload/--no-reload", default=False, help="Enable/disable auto-reload for development")
def serve(host: str, port: int, reload: bool):
    """Run the API with uvicorn"""
    uvicorn.run("uploads_api.main:create_app", factory=True, host=host, port=port, reload=reload)


@cli.command(name="list")
@api_url_option
def list_files(api_url: str):
    """List file records, newest first"""
    try:
        files = FilesAPIClient(api_url).list_files()
    except FilesAPIClientError as e:
        raise click.ClickException(e.message)

    if not files:
        click.echo("No files found")
        return
    click.echo(f"Found {len(files)} files:")
    for record in files:
        click.echo(
            f"  {record['id']}  {record['status']:<9}  {record['size']:>10}  "
            f"{record['uploadedAt']}  {record['name']}"
        )


@cli.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--bucket", default=None, help="Destination bucket; defaults to S3_BUCKET_NAME")
@api_url_option
def upload(csv_file: str, bucket, api_url: str):
    """Upload a CSV and record it"""
    settings = get_settings()
    client = FilesAPIClient(api_url)
    try:
        record = client.upload_csv(csv_file, bucket or settings.s3_bucket_name, max_bytes=settings.max_upload_bytes)
    except ValidationError as e:
        raise click.BadParameter(e.message, param_hint="CSV_FILE")
    except MetadataStepError as e:
        raise click.ClickException(
            f"{e.message}. Bytes are at {e.bucket}/{e.storage_path}; create the record with that path to finish."
        )
    except FilesAPIClientError as e:
        raise click.ClickException(e.message)
    click.echo(f"Uploaded {record['name']} as {record['id']} ({record['storagePath']})")


@cli.command()
@click.argument("file_id")
@click.argument("status", type=click.Choice([s.value for s in FileStatus]))
@click.option("--version", "version", type=int, default=None, help="Fail if the record changed since this version")
@api_url_option
def set_status(file_id: str, status: str, version, api_url: str):
    """Change the status of a file record"""
    try:
        record = FilesAPIClient(api_url).update_status(file_id, status, version=version)
    except FilesAPIClientError as e:
        raise click.ClickException(e.message)
    click.echo(f"{record['id']} is now {record['status']} (version {record['version']})")


@cli.command()
@click.argument("file_id")
@click.option("--version", "version", type=int, default=None, help="Fail if the record changed since this version")
@api_url_option
def delete(file_id: str, version, api_url: str):
    """Delete a file record"""
    try:
        FilesAPIClient(api_url).delete_file(file_id, version=version)
    except FilesAPIClientError as e:
        raise click.ClickException(e.message)
    click.echo(f"Deleted {file_id}")


if __name__ == "__main__":
    cli()
