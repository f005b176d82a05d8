import logging
import os
import shutil
import tempfile
from typing import BinaryIO, Optional, Tuple

from src.objectstore.errors import (
    MissingFile,
    OversizedPayload,
    PersistError,
    StorageError,
    TranscodeError,
)
from src.objectstore.ingest.blob_writer import BlobWriter, discard_partial
from src.objectstore.ingest.classifier import FormatClass, classify
from src.objectstore.ingest.identity import IdentityGenerator
from src.objectstore.ingest.models import ConversionOutcome, StoredObject, UploadRequest
from src.objectstore.ingest.size_guard import SizeGuard
from src.objectstore.ingest.transcoder import ImageTranscoder
from src.objectstore.stats import StatsCounter
from src.objectstore.storage import LocalStore

logger = logging.getLogger("objectstore.ingest")


class IngestOrchestrator:
    """
    Turns one upload into one stored object.

    Convertible images are transcoded first; any transcoder failure falls back
    to a single verbatim write of the original bytes. Nothing is retried.
    """

    def __init__(
        self,
        store: LocalStore,
        size_guard: SizeGuard,
        stats: StatsCounter,
        quality: int,
        convert_to_webp: bool = True,
        spool_max_bytes: int = 32 << 20,
        identity: Optional[IdentityGenerator] = None,
        transcoder: Optional[ImageTranscoder] = None,
        writer: Optional[BlobWriter] = None,
    ):
        self.store = store
        self.size_guard = size_guard
        self.stats = stats
        self.quality = quality
        self.convert_to_webp = convert_to_webp
        self.spool_max_bytes = spool_max_bytes
        self.identity = identity or IdentityGenerator()
        self.transcoder = transcoder or ImageTranscoder()
        self.writer = writer or BlobWriter()

    def ingest(self, request: UploadRequest) -> StoredObject:
        if request.content_stream is None or not request.original_filename:
            raise MissingFile()

        self.size_guard.check_declared_size(request.declared_size)
        payload, size, owned = self._materialize(request.content_stream)
        try:
            stored = self._store(request, payload, size)
        finally:
            if owned:
                payload.close()

        self.stats.increment("uploads")
        if stored.was_converted:
            logger.info(
                f"Uploaded & converted: {request.original_filename} -> "
                f"{stored.filename} ({stored.size_bytes} bytes, WebP)"
            )
        else:
            logger.info(
                f"Uploaded: {request.original_filename} -> "
                f"{stored.filename} ({stored.size_bytes} bytes)"
            )
        return stored

    def _materialize(self, stream: BinaryIO) -> Tuple[BinaryIO, int, bool]:
        """
        Give the pipeline a rewindable, bounded view of the upload.

        Returns:
            Tuple of (payload, actual_size, owned) where *owned* tells whether
            the payload is a buffer created here that must be closed.
        """
        seekable = getattr(stream, "seekable", None)
        if seekable and seekable():
            stream.seek(0, os.SEEK_END)
            size = stream.tell()
            stream.seek(0)
            self.size_guard.check_declared_size(size)
            return self.size_guard.clamp(stream), size, False

        buffer = tempfile.SpooledTemporaryFile(max_size=self.spool_max_bytes)
        try:
            shutil.copyfileobj(self.size_guard.clamp(stream), buffer)
        except OversizedPayload:
            buffer.close()
            raise
        except OSError as e:
            buffer.close()
            raise StorageError(f"failed to read upload: {e}", cause=e) from e

        size = buffer.tell()
        buffer.seek(0)
        return self.size_guard.clamp(buffer), size, True

    def _store(self, request: UploadRequest, payload: BinaryIO, size: int) -> StoredObject:
        object_id = self.identity.new_id()
        original_ext = request.extension

        outcome = ConversionOutcome.skipped()
        if self.convert_to_webp and classify(original_ext) is FormatClass.CONVERTIBLE:
            outcome = self._try_transcode(request, payload, object_id)

        if outcome.succeeded:
            return StoredObject(
                object_id=object_id,
                extension=self.transcoder.delivery_extension,
                original_extension=original_ext,
                size_bytes=outcome.size_bytes,
                was_converted=True,
            )

        destination = self.store.path_for(f"{object_id}{original_ext}")
        try:
            written = self.writer.write_verbatim(payload, destination)
        except StorageError as e:
            logger.error(
                f"Saving {request.original_filename} failed: {e}",
                extra={"object_id": object_id, "error_code": e.code},
            )
            raise PersistError() from e

        if written != size:
            logger.error(
                f"Short write for {request.original_filename}: {written} of {size} bytes",
                extra={"object_id": object_id, "error_code": PersistError.code},
            )
            discard_partial(destination)
            raise PersistError()

        return StoredObject(
            object_id=object_id,
            extension=original_ext,
            original_extension=original_ext,
            size_bytes=written,
            was_converted=False,
            fallback_reason=outcome.reason,
        )

    def _try_transcode(
        self, request: UploadRequest, payload: BinaryIO, object_id: str
    ) -> ConversionOutcome:
        destination = self.store.path_for(f"{object_id}{self.transcoder.delivery_extension}")
        try:
            written = self.transcoder.transcode(
                payload, request.extension, destination, self.quality
            )
        except (TranscodeError, StorageError) as e:
            reason = e.reason if isinstance(e, TranscodeError) else "storage_error"
            logger.warning(
                f"WebP conversion failed for {request.original_filename}: {e}, saving original",
                extra={"object_id": object_id, "fallback_reason": reason},
            )
            return ConversionOutcome.failed(reason)
        return ConversionOutcome.converted(written)
