"""Upload ingest pipeline: size checks, classification, WebP conversion and storage."""

from .blob_writer import BlobWriter
from .classifier import FormatClass, classify
from .identity import IdentityGenerator
from .models import ConversionOutcome, ConversionStatus, StoredObject, UploadRequest
from .orchestrator import IngestOrchestrator
from .size_guard import BoundedStream, SizeGuard, check_declared_size, clamp
from .transcoder import DELIVERY_EXTENSION, ImageTranscoder

__all__ = [
    "BlobWriter",
    "BoundedStream",
    "ConversionOutcome",
    "ConversionStatus",
    "DELIVERY_EXTENSION",
    "FormatClass",
    "IdentityGenerator",
    "ImageTranscoder",
    "IngestOrchestrator",
    "SizeGuard",
    "StoredObject",
    "UploadRequest",
    "check_declared_size",
    "clamp",
    "classify",
]
