import logging
from typing import Annotated, Optional

from fastapi import Depends, File, UploadFile
from fastapi.routing import APIRouter

from src.objectstore.deps import get_orchestrator
from src.objectstore.ingest import IngestOrchestrator, UploadRequest
from src.objectstore.schemas.responses import ErrorResponse, UploadResponse
from src.objectstore.security import require_token
from src.objectstore.storage import LocalStore, get_store

logger = logging.getLogger("objectstore.uploads")
router = APIRouter(
    tags=["uploads"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    dependencies=[Depends(require_token)],
)
def upload_file(
    file: Annotated[Optional[UploadFile], File(description="The file to upload")] = None,
    orchestrator: IngestOrchestrator = Depends(get_orchestrator),
    store: LocalStore = Depends(get_store),
):
    """
    Store one uploaded file.

    JPEG, PNG and GIF images are converted to WebP when possible; anything
    else, and any image that fails to convert, is stored byte for byte.
    """
    upload = UploadRequest(
        original_filename=file.filename if file is not None else None,
        content_stream=file.file if file is not None else None,
        declared_size=file.size if file is not None else None,
    )
    stored = orchestrator.ingest(upload)

    return UploadResponse(
        url=store.url(stored.filename),
        filename=stored.filename,
        original_extension=stored.original_extension,
        size=stored.size_bytes,
        converted_to_webp=stored.was_converted,
    )
