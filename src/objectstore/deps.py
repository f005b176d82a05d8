from functools import lru_cache
from src.objectstore.configs.config import get_config
from src.objectstore.ingest import IngestOrchestrator, SizeGuard
from src.objectstore.stats import get_stats_counter
from src.objectstore.storage import get_store

@lru_cache(maxsize=1)
def get_orchestrator() -> IngestOrchestrator:
    config = get_config()
    return IngestOrchestrator(
        store=get_store(),
        size_guard=SizeGuard(config.max_file_size_bytes),
        stats=get_stats_counter(),
        quality=config.webp_quality,
        convert_to_webp=config.convert_to_webp,
        spool_max_bytes=config.max_memory_bytes,
    )
