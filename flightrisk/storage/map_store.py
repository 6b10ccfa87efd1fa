import os
import re
import time
from typing import Optional

_MAP_ID = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

class MapStore:
    """Rendered route maps, one HTML file per evaluation id, expired after ttl_seconds."""

    def __init__(self, maps_dir: str, ttl_seconds: int):
        self.maps_dir = maps_dir
        self.ttl_seconds = ttl_seconds
        os.makedirs(self.maps_dir, exist_ok=True)

    def _path(self, map_id: str) -> Optional[str]:
        if not _MAP_ID.match(map_id or ""):
            return None
        return os.path.join(self.maps_dir, f"{map_id}.html")

    def save_html(self, map_id: str, html: str) -> str:
        path = self._path(map_id)
        if path is None:
            raise ValueError(f"Invalid map id: {map_id!r}")
        self._cleanup()
        with open(path, "w", encoding="utf-8") as f:
            f.write(html)
        return path

    def get_path(self, map_id: str) -> Optional[str]:
        path = self._path(map_id)
        if path is None or not os.path.exists(path):
            return None
        if self._expired(path, time.time()):
            self._remove(path)
            return None
        return path

    def _expired(self, path: str, now: float) -> bool:
        return now - os.path.getmtime(path) > self.ttl_seconds

    @staticmethod
    def _remove(path: str) -> None:
        try:
            os.remove(path)
        except OSError:
            pass

    def _cleanup(self) -> None:
        try:
            now = time.time()
            for name in os.listdir(self.maps_dir):
                if not name.endswith(".html"):
                    continue
                p = os.path.join(self.maps_dir, name)
                if self._expired(p, now):
                    self._remove(p)
        except OSError:
            pass
