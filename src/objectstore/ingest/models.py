import os
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import BinaryIO, Optional

# Extensions that can safely become part of a stored object's name
_EXTENSION_RE = re.compile(r"^\.[a-z0-9_+-]{1,16}$")


@dataclass
class UploadRequest:
    """One inbound upload, owned by a single ingest call."""
    original_filename: Optional[str]
    content_stream: Optional[BinaryIO]
    declared_size: Optional[int] = None

    @property
    def extension(self) -> str:
        """Lower-cased extension including the leading dot, or an empty string."""
        if not self.original_filename:
            return ""
        # Suffix from the last dot, so ".png" alone still counts as a PNG
        name = os.path.basename(self.original_filename.replace("\\", "/"))
        dot = name.rfind(".")
        if dot < 0:
            return ""
        ext = name[dot:].lower()
        return ext if _EXTENSION_RE.match(ext) else ""


class ConversionStatus(Enum):
    CONVERTED = "converted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionOutcome:
    status: ConversionStatus
    size_bytes: int = 0
    reason: Optional[str] = None

    @classmethod
    def converted(cls, size_bytes: int) -> "ConversionOutcome":
        return cls(ConversionStatus.CONVERTED, size_bytes=size_bytes)

    @classmethod
    def skipped(cls) -> "ConversionOutcome":
        return cls(ConversionStatus.SKIPPED)

    @classmethod
    def failed(cls, reason: str) -> "ConversionOutcome":
        return cls(ConversionStatus.FAILED, reason=reason)

    @property
    def succeeded(self) -> bool:
        return self.status is ConversionStatus.CONVERTED


@dataclass
class StoredObject:
    """Description of an object that has been durably written."""
    object_id: str
    extension: str
    original_extension: str
    size_bytes: int
    was_converted: bool
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    fallback_reason: Optional[str] = None

    @property
    def filename(self) -> str:
        return f"{self.object_id}{self.extension}"
