import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Optional


logger = logging.getLogger("objectstore.health")


class DependencyType(Enum):
    """Types of dependencies that can be tracked."""
    STORAGE = "storage"
    CACHE = "cache"


class HealthStatus(Enum):
    """Health status levels."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    UNKNOWN = "unknown"


@dataclass
class DependencyHealth:
    """Track the health status of a single dependency."""
    name: str
    dependency_type: DependencyType
    status: HealthStatus = HealthStatus.UNKNOWN
    last_checked: Optional[datetime] = None
    last_success: Optional[datetime] = None
    error_message: Optional[str] = None
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def is_healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.dependency_type.value,
            "status": self.status.value,
            "last_checked": self.last_checked.isoformat() if self.last_checked else None,
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "error": self.error_message,
            "metadata": self.metadata,
        }


class DependencyHealthTracker:
    """Central tracker for the service's dependencies and its uptime."""

    def __init__(self):
        self._dependencies: Dict[str, DependencyHealth] = {}
        self.started_at = datetime.now(timezone.utc)

    def register_dependency(
        self,
        name: str,
        dependency_type: DependencyType,
        metadata: Optional[Dict[str, str]] = None
    ) -> None:
        """Register a new dependency to track."""
        self._dependencies[name] = DependencyHealth(
            name=name,
            dependency_type=dependency_type,
            metadata=metadata or {}
        )
        logger.info(f"Registered dependency: {name} ({dependency_type.value})")

    def _require(self, name: str) -> DependencyHealth:
        try:
            return self._dependencies[name]
        except KeyError:
            raise KeyError(f"Dependency {name} is not registered") from None

    def set_healthy(self, name: str) -> None:
        dep = self._require(name)
        now = datetime.now(timezone.utc)
        if dep.status != HealthStatus.HEALTHY:
            logger.info(f"Dependency {name} marked as healthy")
        dep.status = HealthStatus.HEALTHY
        dep.last_checked = now
        dep.last_success = now
        dep.error_message = None

    def set_unhealthy(self, name: str, error_message: str) -> None:
        dep = self._require(name)
        dep.status = HealthStatus.UNHEALTHY
        dep.last_checked = datetime.now(timezone.utc)
        dep.error_message = error_message
        logger.error(f"Dependency {name} marked as unhealthy: {error_message}")

    def get_dependency(self, name: str) -> Optional[DependencyHealth]:
        return self._dependencies.get(name)

    def get_all_dependencies(self) -> Dict[str, DependencyHealth]:
        return self._dependencies.copy()

    def is_application_healthy(self) -> bool:
        """Healthy only when every registered dependency is healthy."""
        if not self._dependencies:
            return False
        return all(dep.is_healthy for dep in self._dependencies.values())

    def uptime(self) -> timedelta:
        return datetime.now(timezone.utc) - self.started_at


def format_uptime(delta: timedelta) -> str:
    """Render an uptime rounded to the second, e.g. ``1h2m3s``."""
    total = int(round(delta.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{minutes}m{seconds}s"
    return f"{seconds}s"


# Global dependency health tracker instance
_dependency_tracker = DependencyHealthTracker()


def get_dependency_tracker() -> DependencyHealthTracker:
    """Get the global dependency tracker instance."""
    return _dependency_tracker

