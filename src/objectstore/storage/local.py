# objectstore/storage/local.py
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List
from urllib.parse import urljoin

from src.objectstore.errors import InvalidObjectName, ObjectNotFound


@dataclass
class ObjectInfo:
    name: str
    size: int
    modified: datetime


class LocalStore:
    """
    Stores every object as <base_path>/<name> in one flat directory.

    Size and modification time come from the filesystem; nothing else is
    recorded, so listing and serving only ever need `stat`.
    """

    def __init__(self, base_path: str = "./uploads", base_url: str = "http://localhost:4000"):
        self.root = Path(base_path).expanduser().resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/") + "/uploads/"

    # ---------- helpers ---------- #
    @staticmethod
    def validate_name(name: str) -> str:
        if not name or ".." in name or "/" in name or "\\" in name or "\x00" in name:
            raise InvalidObjectName()
        return name

    # ---------- API ---------- #
    def path_for(self, name: str) -> Path:
        return self.root / self.validate_name(name)

    def url(self, name: str) -> str:
        return urljoin(self.base_url, name)

    def stat(self, name: str) -> ObjectInfo:
        path = self.path_for(name)
        try:
            st = path.stat()
        except FileNotFoundError:
            raise ObjectNotFound(name)
        if not path.is_file():
            raise ObjectNotFound(name)
        return ObjectInfo(
            name=name,
            size=st.st_size,
            modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        )

    def list_objects(self) -> List[ObjectInfo]:
        objects = []
        with os.scandir(self.root) as entries:
            for entry in entries:
                if not entry.is_file():
                    continue
                try:
                    st = entry.stat()
                except OSError:
                    continue  # Removed between scandir and stat
                objects.append(
                    ObjectInfo(
                        name=entry.name,
                        size=st.st_size,
                        modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                    )
                )
        return sorted(objects, key=lambda o: o.name)

    def delete(self, name: str) -> ObjectInfo:
        info = self.stat(name)
        try:
            self.path_for(name).unlink()
        except FileNotFoundError:
            raise ObjectNotFound(name)
        return info

    def is_available(self) -> bool:
        return self.root.is_dir() and os.access(self.root, os.R_OK | os.W_OK)
