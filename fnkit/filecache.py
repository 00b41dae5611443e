"""A local cache mapping storage paths to local files, with timed removal."""

from __future__ import annotations

import logging
import os
import shutil
import threading
import time
from dataclasses import dataclass
from datetime import timedelta

__all__ = ["CachedFile", "LocalFileCache"]

logger = logging.getLogger(__name__)

Duration = "float | timedelta"


def _seconds(value: float | timedelta) -> float:
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(value)


def _now() -> int:
    return int(time.time())


def _remove_path(path: str) -> None:
    try:
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("cannot remove %s: %s", path, exc)


@dataclass
class CachedFile:
    """A cached local file; ``expire_time`` of -1 never expires."""

    file_path: str
    expire_time: int


class LocalFileCache:
    """Cache of local files keyed by their storage path.

    Expired entries and scheduled deletions are removed from disk by
    :meth:`sweep`, which a background thread runs every ``check_interval``
    seconds when ``start`` is true.
    """

    def __init__(self, check_interval: float | timedelta = 5.0, start: bool = True) -> None:
        self._lock = threading.Lock()
        self._files: dict[str, CachedFile] = {}
        self._delete_tasks: dict[str, int] = {}
        self.check_interval = _seconds(check_interval)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        if start:
            self._thread = threading.Thread(target=self._run, name="local-file-cache", daemon=True)
            self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.check_interval):
            self.sweep()
        logger.info("local file cache closed")

    def get(self, path: str, add_expire: float | timedelta = 0) -> CachedFile | None:
        """Return the entry for ``path``; a positive ``add_expire`` resets its expiry."""
        with self._lock:
            entry = self._files.get(path)
            if entry is None:
                return None
            extra = _seconds(add_expire)
            if extra > 0:
                entry.expire_time = int(time.time() + extra)
            return entry

    def set(self, path: str, local_path: str, ttl: float | timedelta) -> bool:
        """Store ``local_path`` under ``path``; return True if an entry was replaced."""
        with self._lock:
            replaced = path in self._files
            self._files[path] = CachedFile(local_path, int(time.time() + _seconds(ttl)))
            return replaced

    def delete(self, path: str) -> bool:
        """Forget ``path``; return True if it was present. The file stays on disk."""
        with self._lock:
            return self._files.pop(path, None) is not None

    def delete_task(self, path: str, ttl: float | timedelta) -> None:
        """Schedule the file or directory at ``path`` for removal after ``ttl``."""
        with self._lock:
            self._delete_tasks[path] = int(time.time() + _seconds(ttl))

    def sweep(self) -> list[str]:
        """Remove expired entries and due deletions; return the paths removed."""
        now = _now()
        with self._lock:
            expired = [
                key
                for key, entry in self._files.items()
                if entry.expire_time != -1 and now > entry.expire_time
            ]
            doomed = [self._files.pop(key).file_path for key in expired]
            due = [path for path, when in self._delete_tasks.items() if now > when]
            for path in due:
                del self._delete_tasks[path]
            doomed.extend(due)
        for path in doomed:
            _remove_path(path)
        return doomed

    def close(self) -> None:
        """Stop the background sweeper."""
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join()

    def __enter__(self) -> LocalFileCache:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()