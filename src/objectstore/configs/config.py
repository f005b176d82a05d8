import functools
import sys
from enum import StrEnum

from dotenv import load_dotenv
from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings

load_dotenv(
    override=True,  # Override existing environment variables
)

MB = 1 << 20


class LogLevel(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"
    TRACE = "trace"


class StatsBackend(StrEnum):
    MEMORY = "memory"
    REDIS = "redis"


class Config(BaseSettings):
    # Storage configuration
    local_path: str = "./uploads"  # Flat directory holding every stored object
    base_url: str = "http://localhost:4000"  # Public prefix used to build object URLs

    # Security configuration
    auth_token: str = "secrettoken"  # Bearer token required for upload and delete

    # Upload limits
    max_file_size_mb: int = 50  # Per-file ceiling
    multipart_overhead_mb: int = 10  # Extra allowance on the whole request body
    max_memory_mb: int = 32  # Spool to disk beyond this when buffering a stream

    # Image conversion
    convert_to_webp: bool = True
    webp_quality: int = 80  # Lossy quality, 0-100, service-wide

    # Statistics
    stats_backend: StatsBackend = StatsBackend.MEMORY
    redis_url: str = "redis://localhost:6379/0"
    stats_key_prefix: str = "objectstore:stats"

    # FastAPI configuration
    fastapi_host: str = "localhost"
    fastapi_port: int = 4000
    objectstore_log_level: LogLevel = LogLevel.INFO

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * MB

    @property
    def max_request_bytes(self) -> int:
        return (self.max_file_size_mb + self.multipart_overhead_mb) * MB

    @property
    def max_memory_bytes(self) -> int:
        return self.max_memory_mb * MB

    @field_validator("objectstore_log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            # Try to find the enum by value (case-insensitive)
            v_lower = v.lower()
            for level in LogLevel:
                if level.value == v_lower:
                    return level
            valid_levels = [level.value for level in LogLevel]
            raise ValueError(
                f"objectstore_log_level must be one of {valid_levels}, got '{v}'"
            )
        raise ValueError(
            f"objectstore_log_level must be a string or LogLevel enum, got {type(v)}"
        )

    @field_validator("stats_backend", mode="before")
    @classmethod
    def validate_stats_backend(cls, v) -> str:
        if isinstance(v, str):
            return v.lower()
        return v

    @field_validator("webp_quality")
    @classmethod
    def validate_webp_quality(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"webp_quality must be between 0 and 100, got {v}")
        return v

    @field_validator("max_file_size_mb", "multipart_overhead_mb", "max_memory_mb")
    @classmethod
    def validate_sizes(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"size settings must not be negative, got {v}")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@functools.lru_cache(maxsize=1)
def get_config() -> Config:
    try:
        return Config()
    except ValidationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Unexpected error while loading configuration: {e}", file=sys.stderr)
        sys.exit(1)
