from __future__ import annotations

import logging
import os
import threading
import time
import uuid
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from inventory_ledger.core.errors import LockAcquisitionError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 20
DEFAULT_RETRY_DELAY_MS = 100
DEFAULT_STALE_TIMEOUT_MS = 5000


class FileMutex:
    """Advisory lock backed by atomic directory creation.

    Every holder sharing ``lock_dir`` is excluded, across threads and
    processes. A thread already holding the mutex may nest ``run_exclusive``
    calls; only the outermost call acquires and releases the directory.

    A lock directory older than ``stale_timeout_ms`` is taken over. The
    takeover removes only the directory whose inode and mtime were judged
    stale; a lock another waiter has just created is put back.
    """

    def __init__(
        self,
        lock_name: str,
        lock_dir: Union[str, Path],
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        stale_timeout_ms: int = DEFAULT_STALE_TIMEOUT_MS,
    ) -> None:
        self.name = lock_name
        self.lock_path = Path(lock_dir) / "{}.lock".format(lock_name)
        self.max_retries = max(1, int(max_retries))
        self.retry_delay_ms = max(0, int(retry_delay_ms))
        self.stale_timeout_ms = max(0, int(stale_timeout_ms))
        self._local = threading.local()

    @property
    def held(self) -> bool:
        return getattr(self._local, "depth", 0) > 0

    @property
    def locked(self) -> bool:
        """True while any holder owns the lock directory."""
        return self.lock_path.exists()

    def is_stale(self) -> bool:
        return self._stale_snapshot() is not None

    def _acquire(self) -> None:
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        for _attempt in range(self.max_retries):
            try:
                os.mkdir(self.lock_path)
                return
            except FileExistsError:
                pass

            observed = self._stale_snapshot()
            if observed is not None:
                logger.warning(
                    "Reclaiming stale lock %s",
                    self.lock_path,
                    extra={"lock_name": self.name},
                )
                self._reclaim_stale(observed)
                continue

            time.sleep(self.retry_delay_ms / 1000.0)

        raise LockAcquisitionError(
            "Failed to acquire lock for {} after {} attempts".format(self.lock_path, self.max_retries),
            lock=self.name,
        )

    def _release(self) -> None:
        try:
            os.rmdir(self.lock_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Failed to release lock %s", self.lock_path, exc_info=True)

    def _stale_snapshot(self) -> Optional[os.stat_result]:
        try:
            info = os.stat(self.lock_path)
        except FileNotFoundError:
            return None
        age_ms = (time.time() - info.st_mtime) * 1000.0
        return info if age_ms > self.stale_timeout_ms else None

    def _reclaim_stale(self, observed: os.stat_result) -> bool:
        """Remove the lock directory only if it is the one seen as stale.

        The directory is renamed aside first, so of several waiters that saw
        the same stale lock only one moves it. If the moved directory is not
        the stale one (another waiter already replaced it with a fresh lock),
        it is put back untouched. A waiter that creates the lock during that
        short restore window can still be displaced.
        """
        aside = self.lock_path.with_name("{}.{}.stale".format(self.lock_path.name, uuid.uuid4().hex))
        try:
            os.rename(self.lock_path, aside)
        except FileNotFoundError:
            return False
        except OSError:
            logger.warning("Failed to move stale lock %s aside", self.lock_path, exc_info=True)
            return False

        moved = os.stat(aside)
        if (moved.st_ino, moved.st_mtime_ns) != (observed.st_ino, observed.st_mtime_ns):
            logger.info("Lock %s was renewed by another holder; restoring it", self.lock_path)
            try:
                os.rename(aside, self.lock_path)
            except OSError:
                logger.warning("Failed to restore lock %s", self.lock_path, exc_info=True)
            return False

        try:
            os.rmdir(aside)
        except OSError:
            logger.warning("Failed to remove stale lock %s", aside, exc_info=True)
        return True

    def run_exclusive(self, task: Callable[[], T]) -> T:
        depth = getattr(self._local, "depth", 0)
        if depth == 0:
            self._acquire()
        self._local.depth = depth + 1
        try:
            return task()
        finally:
            self._local.depth = depth
            if depth == 0:
                self._release()


class LockManager:
    """Hands out one ``FileMutex`` per resource name."""

    def __init__(
        self,
        lock_dir: Union[str, Path],
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        stale_timeout_ms: int = DEFAULT_STALE_TIMEOUT_MS,
    ) -> None:
        self.lock_dir = Path(lock_dir)
        self._options = dict(
            max_retries=max_retries,
            retry_delay_ms=retry_delay_ms,
            stale_timeout_ms=stale_timeout_ms,
        )
        self._mutexes: dict[str, FileMutex] = {}
        self._guard = threading.Lock()

    def get(self, name: str) -> FileMutex:
        with self._guard:
            mutex = self._mutexes.get(name)
            if mutex is None:
                mutex = FileMutex(name, self.lock_dir, **self._options)
                self._mutexes[name] = mutex
            return mutex

    def run_exclusive(self, name: str, task: Callable[[], T]) -> T:
        return self.get(name).run_exclusive(task)

    def names(self) -> list[str]:
        with self._guard:
            return sorted(self._mutexes)


def build_lock_manager(settings, lock_dir: Optional[Union[str, Path]] = None) -> LockManager:
    return LockManager(
        lock_dir or settings.lock_dir,
        max_retries=settings.LOCK_MAX_RETRIES,
        retry_delay_ms=settings.LOCK_RETRY_DELAY_MS,
        stale_timeout_ms=settings.LOCK_STALE_TIMEOUT_MS,
    )


__all__ = ["FileMutex", "LockManager", "build_lock_manager"]
