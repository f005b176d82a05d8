from contextlib import asynccontextmanager
import logging
import signal
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from src.objectstore.configs.config import MB, get_config
from src.objectstore.errors import ObjectStoreError
from src.objectstore.routes import health, objects, uploads
from src.objectstore.security import RequestSizeLimitMiddleware
from src.objectstore.stats import get_stats_counter
from src.objectstore.storage import LocalStore, get_store
import uvicorn
import asyncio

logger = logging.getLogger("objectstore.main")

def handle_shutdown_signal(signum, frame):
    """Handle shutdown signals"""
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    sys.exit(0)


def list_existing_files(store: LocalStore) -> None:
    """Log what is already stored when the service starts."""
    try:
        objects_found = store.list_objects()
    except OSError as e:
        logger.warning(f"Could not read upload directory: {e}")
        return

    if not objects_found:
        logger.info("Upload directory is empty")
        return

    logger.info(f"Found {len(objects_found)} existing files:")
    for info in objects_found:
        logger.info(f"   - {info.name} ({info.size} bytes)")


@asynccontextmanager
async def lifespan(app: FastAPI):
    config = get_config()

    # Ensure upload directory exists
    store = get_store()
    tracker = health.check_dependencies(store, get_stats_counter())
    if not tracker.is_application_healthy():
        logger.warning("Starting with unhealthy dependencies, /health will report 503")

    logger.info(f"Upload directory: {store.root}")
    logger.info(f"Stats backend: {config.stats_backend.value}")
    logger.info(f"Max file size: {config.max_file_size_mb} MB")
    logger.info(f"Max request size: {config.max_request_bytes // MB} MB")
    if config.convert_to_webp:
        logger.info(f"WebP conversion: ENABLED (quality: {config.webp_quality}%)")
    else:
        logger.info("WebP conversion: DISABLED")
    list_existing_files(store)

    yield


app = FastAPI(
    title="Object Store API",
    description="Upload, serve, list and delete blobs, with WebP conversion for images",
    version=health.SERVICE_VERSION,
    lifespan=lifespan,
)

# Reject oversized bodies before multipart parsing
app.add_middleware(RequestSizeLimitMiddleware, max_bytes=get_config().max_request_bytes)


@app.exception_handler(ObjectStoreError)
async def object_store_error_handler(request: Request, exc: ObjectStoreError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_form", "code": 400, "message": f"Form data invalid: {fields}"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": "internal_error", "code": 500, "message": "Internal server error"},
    )


app.include_router(health.router)
app.include_router(uploads.router)
app.include_router(objects.router)

async def main():
    """
    Main entry point for the object store service.
    """
    config = get_config()
    level = config.objectstore_log_level.value.upper()
    logging.basicConfig(
        level=logging.DEBUG if level == "TRACE" else level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting Object Store API...")
    signal.signal(signal.SIGINT, handle_shutdown_signal)
    signal.signal(signal.SIGTERM, handle_shutdown_signal)

    if hasattr(signal, "SIGHUP"):
        signal.signal(signal.SIGHUP, handle_shutdown_signal)

    server_config = uvicorn.Config(
        app,
        host=config.fastapi_host,
        port=config.fastapi_port,
        log_level=config.objectstore_log_level.value,
        use_colors=True,
        access_log=True,
    )
    server = uvicorn.Server(server_config)

    try:
        await server.serve()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    except Exception as e:
        logger.error(f"Server error: {str(e)}")
        raise


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
