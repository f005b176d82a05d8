from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel


class UploadResponse(BaseModel):
    """Body returned for a stored upload."""
    url: str
    filename: str
    original_extension: str = ""
    size: int
    converted_to_webp: bool
    message: str = "File uploaded successfully"


class ErrorResponse(BaseModel):
    error: str
    code: int
    message: str


class FileInfo(BaseModel):
    name: str
    size: int
    modified: datetime
    url: str


class FileListResponse(BaseModel):
    files: List[FileInfo]
    count: int


class DeleteResponse(BaseModel):
    message: str = "File deleted successfully"
    filename: str
    size: int


class Statistics(BaseModel):
    uploads: int = 0
    gets: int = 0
    deletes: int = 0


class StatsResponse(BaseModel):
    statistics: Statistics
    uptime: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    uptime: str
    dependencies: Dict[str, Dict[str, Any]] = {}


class ServiceInfo(BaseModel):
    name: str
    version: str
    endpoints: Dict[str, str]
    auth_header: str
