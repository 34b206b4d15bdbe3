"""Durable local key/value storage and the submission cooldown."""

import logging
import sqlite3
import time
from typing import Optional

from diskcache import Cache

from ..core.config import settings
from ..core.constants import CooldownConstants
from ..core.errors import StorageError

logger = logging.getLogger(__name__)


class LocalStorage:
    """String key/value store backed by a diskcache directory.
    
    Each ``set_item`` replaces the whole value in a single transaction, so a
    reader never observes a partially written blob.
    """
    
    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or settings.storage_dir
        try:
            self._cache = Cache(self.directory)
        except (sqlite3.Error, OSError) as e:
            raise StorageError("open", self.directory, e) from e
        logger.debug(f"Local storage opened at {self.directory}")
    
    def get_item(self, key: str) -> Optional[str]:
        try:
            return self._cache.get(key)
        except (sqlite3.Error, OSError) as e:
            raise StorageError("read", key, e) from e
    
    def set_item(self, key: str, value: str) -> None:
        try:
            self._cache.set(key, value)
        except (sqlite3.Error, OSError) as e:
            raise StorageError("write", key, e) from e
    
    def remove_item(self, key: str) -> None:
        try:
            self._cache.delete(key)
        except (sqlite3.Error, OSError) as e:
            raise StorageError("delete", key, e) from e
    
    def close(self) -> None:
        self._cache.close()
    
    def __enter__(self):
        return self
    
    def __exit__(self, *exc):
        self.close()


class CooldownGate:
    """Caller-side rate limit based on a stored last-submit timestamp."""
    
    def __init__(self, storage: LocalStorage, interval_seconds: Optional[int] = None, disabled: Optional[bool] = None):
        self.storage = storage
        self.interval_seconds = settings.cooldown_seconds if interval_seconds is None else interval_seconds
        self.disabled = settings.disable_cooldown if disabled is None else disabled
    
    def _last_submit_ms(self) -> Optional[int]:
        stored = self.storage.get_item(CooldownConstants.STORAGE_KEY)
        if not stored:
            return None
        try:
            return int(stored)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring unreadable cooldown timestamp: {stored!r}")
            return None
    
    def remaining(self, now: Optional[float] = None) -> float:
        """Seconds left before the next submission is allowed."""
        if self.disabled:
            return 0.0
        last = self._last_submit_ms()
        if last is None:
            return 0.0
        now_ms = int((time.time() if now is None else now) * 1000)
        remaining_ms = self.interval_seconds * 1000 - (now_ms - last)
        return max(0.0, remaining_ms / 1000.0)
    
    def is_active(self, now: Optional[float] = None) -> bool:
        return self.remaining(now) > 0
    
    def start(self, now: Optional[float] = None) -> None:
        now_ms = int((time.time() if now is None else now) * 1000)
        self.storage.set_item(CooldownConstants.STORAGE_KEY, str(now_ms))
        logger.debug(f"Cooldown started for {self.interval_seconds}s")
    
    def format_remaining(self, now: Optional[float] = None) -> str:
        remaining = int(self.remaining(now))
        return f"{remaining // 60}m {remaining % 60}s"
