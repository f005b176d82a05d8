"""Raster image to WebP conversion.

Decoding is driven by the upload's extension rather than by sniffing: a file
named ``.png`` that is not a PNG fails to decode and is stored verbatim by the
caller instead.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO

from PIL import Image

from src.objectstore.errors import DecodeError, EncodeError, StorageError
from src.objectstore.ingest.blob_writer import discard_partial, rewind
from src.objectstore.ingest.classifier import DECODERS

logger = logging.getLogger("objectstore.ingest")

DELIVERY_FORMAT = "WEBP"
DELIVERY_EXTENSION = ".webp"

# Modes the WebP encoder accepts as-is
_WEBP_MODES = ("RGB", "RGBA")
_ALPHA_MODES = ("LA", "La", "PA", "RGBa")

_DECODE_ERRORS = (OSError, SyntaxError, ValueError, EOFError, Image.DecompressionBombError)
_ENCODE_ERRORS = (OSError, ValueError, KeyError)


class ImageTranscoder:
    delivery_format = DELIVERY_FORMAT
    delivery_extension = DELIVERY_EXTENSION

    def transcode(
        self,
        stream: BinaryIO,
        source_extension: str,
        destination: Path,
        quality: int,
    ) -> int:
        """
        Decode *stream* as *source_extension* and write it to *destination* as
        lossy WebP.

        Returns:
            The number of bytes in the written file.

        Raises:
            DecodeError: unsupported extension or malformed image.
            StorageError: the destination could not be created.
            EncodeError: encoding failed; the destination has been removed.
        """
        rewind(stream)
        image = self._decode(stream, source_extension)

        try:
            out = open(destination, "xb")
        except OSError as e:
            image.close()
            raise StorageError(f"failed to create output file: {e.strerror}", cause=e) from e

        try:
            with out:
                image.save(out, format=self.delivery_format, quality=quality, lossless=False)
                out.flush()
                written = os.fstat(out.fileno()).st_size
        except _ENCODE_ERRORS as e:
            discard_partial(destination)
            raise EncodeError(f"failed to encode {self.delivery_format}: {e}", cause=e) from e
        finally:
            image.close()

        return written

    def _decode(self, stream: BinaryIO, source_extension: str) -> Image.Image:
        decoder = DECODERS.get((source_extension or "").lower())
        if decoder is None:
            raise DecodeError(f"unsupported format: {source_extension or '<none>'}")

        try:
            opened = Image.open(stream, formats=[decoder])
            opened.load()
            # Detach from the stream; closing *opened* would close the caller's stream
            return self._detach(opened)
        except _DECODE_ERRORS as e:
            raise DecodeError(f"failed to decode image: {e}", cause=e) from e

    @staticmethod
    def _detach(image: Image.Image) -> Image.Image:
        if image.mode in _WEBP_MODES:
            return image.copy()
        has_alpha = image.mode in _ALPHA_MODES or "transparency" in image.info
        return image.convert("RGBA" if has_alpha else "RGB")
