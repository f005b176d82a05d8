import logging

from fastapi import Depends
from fastapi.responses import FileResponse
from fastapi.routing import APIRouter

from src.objectstore.errors import StorageError
from src.objectstore.schemas.responses import (
    DeleteResponse,
    ErrorResponse,
    FileInfo,
    FileListResponse,
)
from src.objectstore.security import require_token
from src.objectstore.stats import StatsCounter, get_stats_counter
from src.objectstore.storage import LocalStore, get_store

logger = logging.getLogger("objectstore.objects")
router = APIRouter(
    tags=["objects"],
    responses={404: {"model": ErrorResponse}},
)


@router.get("/uploads/{filename}")
@router.get("/get/{filename}")
def serve_file(
    filename: str,
    store: LocalStore = Depends(get_store),
    stats: StatsCounter = Depends(get_stats_counter),
):
    """Return the stored bytes of one object."""
    info = store.stat(filename)
    # FileResponse sets Content-Length and Last-Modified from the file itself
    response = FileResponse(store.path_for(filename))
    stats.increment("gets")
    logger.info(f"Served file: {filename} ({info.size} bytes)")
    return response


@router.get("/files", response_model=FileListResponse)
def list_files(store: LocalStore = Depends(get_store)):
    """List every stored object."""
    try:
        objects = store.list_objects()
    except OSError as e:
        logger.error(f"Could not read upload directory: {e}")
        raise StorageError("Could not read upload directory") from e

    files = [
        FileInfo(name=o.name, size=o.size, modified=o.modified, url=store.url(o.name))
        for o in objects
    ]
    logger.info(f"Listed {len(files)} files")
    return FileListResponse(files=files, count=len(files))


@router.delete(
    "/delete/{filename}",
    response_model=DeleteResponse,
    dependencies=[Depends(require_token)],
)
def delete_file(
    filename: str,
    store: LocalStore = Depends(get_store),
    stats: StatsCounter = Depends(get_stats_counter),
):
    """Remove one stored object."""
    try:
        info = store.delete(filename)
    except OSError as e:
        logger.error(f"Could not delete {filename}: {e}")
        raise StorageError("Could not delete file") from e

    stats.increment("deletes")
    logger.info(f"Deleted: {filename} ({info.size} bytes)")
    return DeleteResponse(filename=filename, size=info.size)
