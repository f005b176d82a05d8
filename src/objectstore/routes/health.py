import logging
from datetime import datetime, timezone

from fastapi import Depends
from fastapi.routing import APIRouter

from src.objectstore.errors import StorageUnavailable
from src.objectstore.health import (
    DependencyHealthTracker,
    DependencyType,
    format_uptime,
    get_dependency_tracker,
)
from src.objectstore.schemas.responses import (
    ErrorResponse,
    HealthResponse,
    ServiceInfo,
    Statistics,
    StatsResponse,
)
from src.objectstore.stats import StatsCounter, get_stats_counter
from src.objectstore.storage import LocalStore, get_store

logger = logging.getLogger("objectstore.health")
router = APIRouter(tags=["health"])

SERVICE_NAME = "Object Store"
SERVICE_VERSION = "1.0.0"
STORAGE_DEPENDENCY = "upload_directory"
STATS_DEPENDENCY = "stats_backend"


@router.get("/", response_model=ServiceInfo)
def root():
    """
    Describe the service and its endpoints.

    Returns:
        ServiceInfo: name, version and the endpoint map.
    """
    return ServiceInfo(
        name=SERVICE_NAME,
        version=SERVICE_VERSION,
        endpoints={
            "POST /upload": "Upload a file (requires Bearer token)",
            "GET /uploads/<file>": "Download a file",
            "GET /files": "List all files",
            "DELETE /delete/<file>": "Delete a file (requires Bearer token)",
            "GET /stats": "Get server statistics",
            "GET /health": "Health check",
        },
        auth_header="Authorization: Bearer <token>",
    )


def check_dependencies(store: LocalStore, stats: StatsCounter) -> DependencyHealthTracker:
    """Probe the upload directory and the stats backend and record the result."""
    tracker = get_dependency_tracker()
    if tracker.get_dependency(STORAGE_DEPENDENCY) is None:
        tracker.register_dependency(
            STORAGE_DEPENDENCY, DependencyType.STORAGE, {"description": "Upload directory"}
        )
    if tracker.get_dependency(STATS_DEPENDENCY) is None:
        tracker.register_dependency(
            STATS_DEPENDENCY, DependencyType.CACHE, {"backend": type(stats).__name__}
        )

    if store.is_available():
        tracker.set_healthy(STORAGE_DEPENDENCY)
    else:
        tracker.set_unhealthy(STORAGE_DEPENDENCY, "Upload directory not accessible")

    if stats.is_available():
        tracker.set_healthy(STATS_DEPENDENCY)
    else:
        tracker.set_unhealthy(STATS_DEPENDENCY, "Statistics backend not reachable")
    return tracker


@router.get("/health", response_model=HealthResponse, responses={503: {"model": ErrorResponse}})
def health_check(
    store: LocalStore = Depends(get_store),
    stats: StatsCounter = Depends(get_stats_counter),
):
    """
    Report whether the upload directory and the stats backend are usable.

    Returns:
        HealthResponse: healthy status, uptime and per-dependency state; 503
        when any dependency is unhealthy.
    """
    tracker = check_dependencies(store, stats)
    dependencies = tracker.get_all_dependencies()
    if not tracker.is_application_healthy():
        failing = sorted(name for name, dep in dependencies.items() if not dep.is_healthy)
        raise StorageUnavailable(f"Unhealthy dependencies: {', '.join(failing)}")

    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        uptime=format_uptime(tracker.uptime()),
        dependencies={name: dep.to_dict() for name, dep in dependencies.items()},
    )


@router.get("/stats", response_model=StatsResponse)
def get_stats(stats: StatsCounter = Depends(get_stats_counter)):
    """Counters of confirmed uploads, downloads and deletions."""
    tracker = get_dependency_tracker()
    return StatsResponse(
        statistics=Statistics(**stats.snapshot()),
        uptime=format_uptime(tracker.uptime()),
    )
