"""Error taxonomy shared by the ingest pipeline and the HTTP collaborators.

Every error carries a short machine-readable ``code``, the HTTP status it maps
to and a message that is safe to show to clients (no paths, no tracebacks).
"""

from typing import Any, Dict, Optional

from src.objectstore.configs.config import MB


class ObjectStoreError(Exception):
    """Base class for every error the service reports to clients."""

    code: str = "internal_error"
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "code": self.status_code, "message": self.message}


class IngestError(ObjectStoreError):
    """Raised when an upload cannot be turned into a stored object."""


class MissingFile(IngestError):
    code = "missing_file"
    status_code = 400
    default_message = "No file found in form data"


class OversizedPayload(IngestError):
    code = "payload_too_large"
    status_code = 413

    def __init__(self, actual: int, limit: int):
        self.actual = actual
        self.limit = limit
        super().__init__(
            f"File size ({actual} bytes = {actual / MB:.2f} MB) exceeds "
            f"{limit} bytes ({limit / MB:.2f} MB) limit"
        )


class StorageError(IngestError):
    code = "storage_error"
    status_code = 500
    default_message = "Could not write file to storage"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class PersistError(IngestError):
    code = "persist_failed"
    status_code = 500
    default_message = "Could not save file"


class TranscodeError(IngestError):
    """Image conversion failed; the orchestrator recovers from these."""

    reason: str = "transcode_error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class DecodeError(TranscodeError):
    code = "decode_failed"
    status_code = 422
    default_message = "Could not decode image"
    reason = "decode_error"


class EncodeError(TranscodeError):
    code = "encode_failed"
    status_code = 500
    default_message = "Could not encode image"
    reason = "encode_error"


class Unauthorized(ObjectStoreError):
    code = "unauthorized"
    status_code = 401
    default_message = "Invalid or missing authorization token"


class InvalidObjectName(ObjectStoreError):
    code = "invalid_filename"
    status_code = 400
    default_message = "Filename contains invalid characters"


class ObjectNotFound(ObjectStoreError):
    code = "not_found"
    status_code = 404

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"File '{name}' does not exist")


class StorageUnavailable(ObjectStoreError):
    code = "unhealthy"
    status_code = 503
    default_message = "Upload directory not accessible"


class StatsUnavailable(ObjectStoreError):
    code = "stats_unavailable"
    status_code = 503
    default_message = "Statistics backend not reachable"
