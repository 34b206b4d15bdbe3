"""Local issue analytics: category/urgency tallies and a bounded recency feed."""

import json
import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .constants import AnalyticsConstants
from .models import AggregateState, AnalysisResult, RecentIssue, StoredComplaint
from .rules import normalize_category

logger = logging.getLogger(__name__)

Observer = Callable[["IssueAnalytics"], None]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _tally(state: AggregateState, category: str, urgency: str) -> None:
    """Count one issue. Shared by live submissions and reconciliation."""
    category_key = normalize_category(category)
    if category_key in state.category_counts:
        state.category_counts[category_key] += 1
    else:
        state.category_counts[AnalyticsConstants.DEFAULT_CATEGORY] += 1

    urgency_key = urgency.lower() if isinstance(urgency, str) else None
    if urgency_key in state.urgency_counts:
        state.urgency_counts[urgency_key] += 1


class IssueAnalytics:
    """Owns the AggregateState and keeps it in durable storage.

    ``storage`` needs ``get_item(key)`` and ``set_item(key, value)``; a
    :class:`~civiclens.services.storage.LocalStorage` is the usual choice.
    Every mutation computes the new state on a copy, writes it, and only
    then replaces the in-memory state, so a failed write leaves the
    aggregate exactly as it was. Mutations hold a reentrant lock since the
    Streamlit sessions and the Firestore listener thread share one instance.
    """

    def __init__(self, storage, storage_key: str = AnalyticsConstants.STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self._observers: List[Observer] = []
        self._last_id = 0
        self._lock = threading.RLock()
        self.state = self._load()

    # ---- persistence ----

    def _load(self) -> AggregateState:
        stored = self.storage.get_item(self.storage_key)
        if not stored:
            return AggregateState()
        try:
            return AggregateState.from_dict(json.loads(stored))
        except ValueError as e:
            # json.JSONDecodeError is a ValueError too
            logger.warning(f"Discarding unreadable analytics payload: {e}")
            return AggregateState()

    def _commit(self, new_state: AggregateState) -> None:
        self.storage.set_item(self.storage_key, json.dumps(new_state.to_dict()))
        self.state = new_state
        self._notify()

    # ---- observers ----

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register a refresh callback; returns a function that removes it."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)

    # ---- mutations ----

    def _next_id(self) -> int:
        """Millisecond timestamp, bumped so successive ids never collide."""
        with self._lock:
            candidate = int(time.time() * 1000)
            self._last_id = max(candidate, self._last_id + 1)
            return self._last_id

    def record(self, result: AnalysisResult, raw_text: str = "") -> RecentIssue:
        """Track one classified complaint."""
        with self._lock:
            new_state = self.state.copy()
            _tally(new_state, result.category, result.urgency)

            issue = RecentIssue(
                id=self._next_id(),
                category=result.category,
                urgency=result.urgency,
                summary=(result.summary or "")[:AnalyticsConstants.SUMMARY_MAX_LENGTH],
                timestamp=_now_iso(),
            )
            new_state.recent_issues.insert(0, issue)
            del new_state.recent_issues[AnalyticsConstants.MAX_RECENT_ISSUES:]

            self._commit(new_state)
            total = self.total_issues()
        logger.info(f"Tracked {result.category} issue ({len(raw_text)} chars), total {total}")
        return issue

    def rebuild_from(self, records: Iterable[Union[StoredComplaint, Dict[str, Any]]]) -> None:
        """Replace the aggregate with one built from stored complaint records.

        Records are replayed in the given order; the caller decides ordering.
        """
        new_state = AggregateState()
        count = 0
        with self._lock:
            for record in records:
                if not isinstance(record, StoredComplaint):
                    record = StoredComplaint.from_record(record)
                _tally(new_state, record.category, record.urgency)
                new_state.recent_issues.append(RecentIssue(
                    id=record.id if record.id is not None else self._next_id(),
                    category=record.category,
                    urgency=record.urgency,
                    summary=(record.summary or "")[:AnalyticsConstants.SUMMARY_MAX_LENGTH] or AnalyticsConstants.NO_SUMMARY,
                    timestamp=record.created_at or _now_iso(),
                ))
                count += 1
            del new_state.recent_issues[AnalyticsConstants.MAX_RECENT_ISSUES:]

            self._commit(new_state)
        logger.info(f"Rebuilt analytics from {count} stored complaints")

    def clear(self) -> None:
        """Reset every tally and empty the feed."""
        with self._lock:
            self._commit(AggregateState())
        logger.info("Analytics data cleared")

    # ---- queries ----

    @property
    def category_counts(self) -> Dict[str, int]:
        return dict(self.state.category_counts)

    @property
    def urgency_counts(self) -> Dict[str, int]:
        return dict(self.state.urgency_counts)

    @property
    def recent_issues(self) -> List[RecentIssue]:
        return list(self.state.recent_issues)

    def total_issues(self) -> int:
        return sum(self.state.category_counts.values())

    def top_category(self) -> str:
        """Most reported category key; the first one listed wins a tie."""
        best_key, best_count = None, 0
        for key, count in self.state.category_counts.items():
            if count > best_count:
                best_key, best_count = key, count
        return best_key if best_key is not None else AnalyticsConstants.NO_DATA

    def category_percentage(self, key: str) -> float:
        total = self.total_issues()
        if total == 0:
            return 0.0
        return self.state.category_counts.get(key, 0) / total * 100

    def category_bars(self) -> List[Tuple[str, int, float]]:
        """(key, count, percentage) for each dashboard category, in display order."""
        return [
            (key, self.state.category_counts.get(key, 0), self.category_percentage(key))
            for key in AnalyticsConstants.CATEGORY_KEYS
        ]

    def critical_count(self) -> int:
        """Issues flagged critical or high."""
        return self.state.urgency_counts.get("critical", 0) + self.state.urgency_counts.get("high", 0)

    def feed(self, limit: Optional[int] = AnalyticsConstants.FEED_DISPLAY_LIMIT) -> List[RecentIssue]:
        return list(self.state.recent_issues[:limit])
