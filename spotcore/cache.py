"""On-disk cache for credentials, volume and audio files with LRU size limiting."""

from __future__ import annotations

import heapq
import io
import itertools
import logging
import os
import re
import shutil
import threading
import time
from collections.abc import Callable, Hashable
from pathlib import Path
from typing import BinaryIO

from .authentication import Credentials, CredentialsError
from .spotify_id import FileId

logger = logging.getLogger(__name__)

_U16_MAX = 0xFFFF


class SizeLimiter:
    """Tracks file sizes and access times and yields the least recently used
    file while the total size exceeds the limit."""

    def __init__(self, limit: int) -> None:
        self.size_limit = limit
        self.in_use = 0
        self._heap: list[tuple[float, int, Hashable]] = []
        self._entries: dict[Hashable, tuple[float, int]] = {}
        self._sizes: dict[Hashable, int] = {}
        self._counter = itertools.count()

    def _push(self, file: Hashable, accessed: float) -> None:
        entry = (accessed, next(self._counter))
        self._entries[file] = entry
        heapq.heappush(self._heap, (*entry, file))

    def add(self, file: Hashable, size: int, accessed: float) -> None:
        """Add a file, or update its size and access time if already known."""
        self.in_use += size
        self._push(file, accessed)
        old_size = self._sizes.get(file)
        self._sizes[file] = size
        if old_size is not None:
            self.in_use -= old_size

    def exceeds_limit(self) -> bool:
        return self.in_use > self.size_limit

    def pop(self) -> Hashable | None:
        """Remove and return the least recently accessed file if over the limit."""
        if not self.exceeds_limit():
            return None
        while self._heap:
            accessed, counter, file = heapq.heappop(self._heap)
            if self._entries.get(file) == (accessed, counter):
                del self._entries[file]
                self.in_use -= self._sizes.pop(file)
                return file
        raise RuntimeError("size in use is above the limit but no file is tracked")

    def update(self, file: Hashable, access_time: float) -> bool:
        """Update the access time of a known file; return whether it was known."""
        if file not in self._entries:
            return False
        self._push(file, access_time)
        return True

    def remove(self, file: Hashable) -> bool:
        """Forget a file; return whether it was known."""
        if self._entries.pop(file, None) is None:
            return False
        self.in_use -= self._sizes.pop(file)
        return True


class FsSizeLimiter:
    """A thread-safe :class:`SizeLimiter` over a directory tree."""

    def __init__(self, path: str | os.PathLike[str], limit: int) -> None:
        limiter = SizeLimiter(limit)
        self._init_dir(limiter, Path(path))
        self._prune_internal(limiter.pop)
        self._limiter = limiter
        self._lock = threading.Lock()

    @staticmethod
    def _get_metadata(file: Path) -> tuple[float, int]:
        stat = file.stat()
        return stat.st_atime, stat.st_size

    @classmethod
    def _init_dir(cls, limiter: SizeLimiter, path: Path) -> None:
        try:
            entries = list(os.scandir(path))
        except OSError as exc:
            logger.warning("Could not read directory %s in cache dir: %s", path, exc)
            return

        for entry in entries:
            entry_path = Path(entry.path)
            try:
                if entry.is_symlink() or entry.is_dir(follow_symlinks=False):
                    cls._init_dir(limiter, entry_path)
                elif entry.is_file(follow_symlinks=False):
                    try:
                        access_time, size = cls._get_metadata(entry_path)
                    except OSError as exc:
                        logger.warning("Could not read file %s in cache dir: %s", entry_path, exc)
                    else:
                        limiter.add(entry_path, size, access_time)
                else:
                    logger.warning("File %s in cache dir has unsupported type", entry_path)
            except OSError as exc:
                logger.warning("Could not get type of file %s in cache dir: %s", entry_path, exc)

    @staticmethod
    def _prune_internal(pop: Callable[[], Hashable | None]) -> None:
        first = True
        count = 0
        while (file := pop()) is not None:
            if first:
                logger.debug("Cache dir exceeds limit, removing least recently used files.")
                first = False
            try:
                os.remove(file)
            except OSError as exc:
                logger.warning("Could not remove file %s from cache dir: %s", file, exc)
            else:
                count += 1
        if count:
            logger.info("Removed %d cache files.", count)

    def add(self, file: Path, size: int) -> None:
        with self._lock:
            self._limiter.add(Path(file), size, time.time())

    def touch(self, file: Path) -> bool:
        with self._lock:
            return self._limiter.update(Path(file), time.time())

    def remove(self, file: Path) -> None:
        with self._lock:
            self._limiter.remove(Path(file))

    def prune(self) -> None:
        def pop() -> Hashable | None:
            with self._lock:
                return self._limiter.pop()

        self._prune_internal(pop)


class RemoveFileError(Exception):
    """Raised when a cached file cannot be removed."""


class Cache:
    """A cache for volume, credentials and audio files."""

    def __init__(
        self,
        credentials_path: str | os.PathLike[str] | None = None,
        volume_path: str | os.PathLike[str] | None = None,
        audio_path: str | os.PathLike[str] | None = None,
        size_limit: int | None = None,
    ) -> None:
        self._credentials_location: Path | None = None
        self._volume_location: Path | None = None
        self._audio_location: Path | None = None
        self._size_limiter: FsSizeLimiter | None = None

        if credentials_path is not None:
            location = Path(credentials_path)
            location.mkdir(parents=True, exist_ok=True)
            self._credentials_location = location / "credentials.json"

        if volume_path is not None:
            location = Path(volume_path)
            location.mkdir(parents=True, exist_ok=True)
            self._volume_location = location / "volume"

        if audio_path is not None:
            location = Path(audio_path)
            location.mkdir(parents=True, exist_ok=True)
            if size_limit is not None:
                self._size_limiter = FsSizeLimiter(location, size_limit)
            self._audio_location = location

    def credentials(self) -> Credentials | None:
        """Return cached credentials, or ``None`` if absent or unreadable."""
        if self._credentials_location is None:
            return None
        try:
            text = self._credentials_location.read_text(encoding="utf-8")
            return Credentials.from_json(text)
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError, CredentialsError) as exc:
            logger.warning("Error reading credentials from cache: %s", exc)
            return None

    def save_credentials(self, credentials: Credentials) -> None:
        if self._credentials_location is None:
            return
        try:
            self._credentials_location.write_text(credentials.to_json(), encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot save credentials to cache: %s", exc)

    def volume(self) -> int | None:
        """Return the cached volume, or ``None`` if absent or unreadable."""
        if self._volume_location is None:
            return None
        try:
            text = self._volume_location.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading volume from cache: %s", exc)
            return None
        if not re.fullmatch(r"\+?[0-9]+", text) or int(text) > _U16_MAX:
            logger.warning("Error reading volume from cache: invalid value %r", text)
            return None
        return int(text)

    def save_volume(self, volume: int) -> None:
        if self._volume_location is None:
            return
        try:
            self._volume_location.write_text(str(volume), encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot save volume to cache: %s", exc)

    def _file_path(self, file_id: FileId) -> Path | None:
        if self._audio_location is None:
            return None
        name = file_id.to_base16()
        return self._audio_location / name[:2] / name[2:]

    def file(self, file_id: FileId) -> BinaryIO | None:
        """Open a cached audio file for reading, or return ``None``."""
        path = self._file_path(file_id)
        if path is None:
            return None
        try:
            handle = path.open("rb")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Error reading file from cache: %s", exc)
            return None
        if self._size_limiter is not None:
            self._size_limiter.touch(path)
        return handle

    def save_file(self, file_id: FileId, contents: BinaryIO | bytes) -> None:
        """Store an audio file, pruning old files if over the size limit."""
        path = self._file_path(file_id)
        if path is None:
            return
        source = io.BytesIO(contents) if isinstance(contents, (bytes, bytearray)) else contents
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("wb") as target:
                shutil.copyfileobj(source, target)
                size = target.tell()
        except OSError as exc:
            logger.debug("Could not save file to cache: %s", exc)
            return
        if self._size_limiter is not None:
            self._size_limiter.add(path, size)
            self._size_limiter.prune()

    def remove_file(self, file_id: FileId) -> None:
        """Delete a cached audio file; raise :class:`RemoveFileError` on failure."""
        path = self._file_path(file_id)
        if path is None:
            raise RemoveFileError("no audio cache location configured")
        try:
            os.remove(path)
        except OSError as exc:
            logger.warning("Unable to remove file from cache: %s", exc)
            raise RemoveFileError(str(exc)) from exc
        if self._size_limiter is not None:
            self._size_limiter.remove(path)