import logging
import os
from pathlib import Path
from typing import BinaryIO

from src.objectstore.errors import OversizedPayload, StorageError

logger = logging.getLogger("objectstore.ingest")

CHUNK_SIZE = 1 << 20


def rewind(stream: BinaryIO) -> None:
    """Seek back to the start when the stream allows it."""
    seekable = getattr(stream, "seekable", None)
    if seekable and seekable():
        stream.seek(0)


def discard_partial(path: Path) -> None:
    """Remove a half-written destination so no list/serve path can pick it up."""
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.error(f"Could not remove partial file {path.name}: {e}")


class BlobWriter:
    """Streams a payload to storage without transformation."""

    def __init__(self, chunk_size: int = CHUNK_SIZE):
        self.chunk_size = chunk_size

    def write_verbatim(self, stream: BinaryIO, destination: Path) -> int:
        rewind(stream)

        try:
            out = open(destination, "xb")
        except OSError as e:
            raise StorageError(f"failed to create output file: {e.strerror}", cause=e) from e

        written = 0
        try:
            with out:
                while True:
                    chunk = stream.read(self.chunk_size)
                    if not chunk:
                        break
                    out.write(chunk)
                    written += len(chunk)
        except OversizedPayload:
            discard_partial(destination)
            raise
        except OSError as e:
            # Covers client disconnects surfacing from the inbound stream too
            discard_partial(destination)
            raise StorageError(f"failed to copy file: {e}", cause=e) from e

        return written
