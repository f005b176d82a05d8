from .local import LocalStore, ObjectInfo
from functools import lru_cache
from src.objectstore.configs.config import get_config


@lru_cache
def get_store() -> LocalStore:
    return LocalStore(
        base_path=get_config().local_path,
        base_url=get_config().base_url,
    )


__all__ = ["LocalStore", "ObjectInfo", "get_store"]
