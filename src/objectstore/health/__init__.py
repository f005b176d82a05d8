"""Health monitoring and dependency tracking module."""

from .dependency_status import (
    DependencyType,
    HealthStatus,
    DependencyHealth,
    DependencyHealthTracker,
    format_uptime,
    get_dependency_tracker,
)

__all__ = [
    "DependencyType",
    "HealthStatus",
    "DependencyHealth",
    "DependencyHealthTracker",
    "format_uptime",
    "get_dependency_tracker",
]
