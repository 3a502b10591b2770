import os
import threading

from .utils import ensure_dir


class BlobStore:
    """Key-addressed store of opaque JSON text, one file per key."""

    def __init__(self, directory: str):
        self._dir = directory
        self._lock = threading.Lock()

    def _path_for(self, key: str) -> str:
        if not key or os.sep in key or (os.altsep and os.altsep in key):
            raise ValueError(f"invalid store key: {key!r}")
        return os.path.join(self._dir, f"{key}.json")

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        with self._lock:
            if not os.path.exists(path):
                return None
            with open(path, "r", encoding="utf-8") as f:
                return f.read()

    def put(self, key: str, text: str) -> None:
        path = self._path_for(key)
        tmp = path + ".tmp"
        with self._lock:
            ensure_dir(self._dir)
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp, path)
