"""Data models for CivicLens."""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Union

from .constants import AnalyticsConstants


@dataclass
class AnalysisResult:
    """Structured analysis of a single complaint."""
    category: str
    sentiment: str
    urgency: str
    urgency_score: int
    summary: str
    recommendations: List[str]
    
    def to_dict(self) -> Dict[str, Any]:
        """Wire shape shared with the language model and the document store."""
        return {
            "category": self.category,
            "sentiment": self.sentiment,
            "urgency": self.urgency,
            "urgencyScore": self.urgency_score,
            "summary": self.summary,
            "recommendations": list(self.recommendations),
        }


@dataclass
class RecentIssue:
    """Entry in the bounded recency buffer."""
    id: Union[str, int]
    category: str
    urgency: str
    summary: str  # truncated to AnalyticsConstants.SUMMARY_MAX_LENGTH
    timestamp: str  # ISO 8601


@dataclass
class AggregateState:
    """Running tallies and recency buffer owned by IssueAnalytics."""
    category_counts: Dict[str, int] = field(
        default_factory=lambda: {k: 0 for k in AnalyticsConstants.CATEGORY_KEYS}
    )
    urgency_counts: Dict[str, int] = field(
        default_factory=lambda: {k: 0 for k in AnalyticsConstants.URGENCY_KEYS}
    )
    recent_issues: List[RecentIssue] = field(default_factory=list)
    
    def copy(self) -> "AggregateState":
        return AggregateState(
            category_counts=dict(self.category_counts),
            urgency_counts=dict(self.urgency_counts),
            recent_issues=list(self.recent_issues),
        )
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "issues": [
                {
                    "id": issue.id,
                    "category": issue.category,
                    "urgency": issue.urgency,
                    "summary": issue.summary,
                    "timestamp": issue.timestamp,
                }
                for issue in self.recent_issues
            ],
            "categories": dict(self.category_counts),
            "urgencyCount": dict(self.urgency_counts),
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateState":
        """Rebuild from a stored payload. Raises ValueError on a malformed one."""
        if not isinstance(data, dict):
            raise ValueError("Aggregate payload must be an object")
        try:
            state = cls()
            for key, value in data["categories"].items():
                if key in state.category_counts:
                    state.category_counts[key] = max(0, int(value))
            for key, value in data["urgencyCount"].items():
                if key in state.urgency_counts:
                    state.urgency_counts[key] = max(0, int(value))
            state.recent_issues = [
                RecentIssue(
                    id=item["id"],
                    category=item.get("category"),
                    urgency=item.get("urgency"),
                    summary=item.get("summary", ""),
                    timestamp=item.get("timestamp", ""),
                )
                for item in data["issues"]
            ][:AnalyticsConstants.MAX_RECENT_ISSUES]
        except (KeyError, TypeError, AttributeError, OverflowError) as e:
            raise ValueError(f"Malformed aggregate payload: {e}") from e
        return state


@dataclass
class StoredComplaint:
    """A complaint record as held by the remote document store."""
    id: Optional[str]
    category: str
    urgency: str
    summary: Optional[str]
    created_at: Optional[str]
    lat: Optional[float] = None
    lng: Optional[float] = None
    
    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "StoredComplaint":
        """Tolerant conversion; absent or malformed fields take their defaults."""
        category = record.get("category")
        if not isinstance(category, str) or not category.strip():
            category = AnalyticsConstants.DEFAULT_CATEGORY
        urgency = record.get("urgency")
        if not isinstance(urgency, str) or not urgency.strip():
            urgency = AnalyticsConstants.DEFAULT_URGENCY
        summary = record.get("summary")
        created_at = record.get("createdAt")
        return cls(
            id=record.get("id"),
            category=category,
            urgency=urgency,
            summary=summary if isinstance(summary, str) else None,
            created_at=created_at if isinstance(created_at, str) and created_at else None,
            lat=_coordinate(record.get("lat")),
            lng=_coordinate(record.get("lng")),
        )


def _coordinate(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class MapMarker:
    """Pin consumed by the map widget."""
    latitude: float
    longitude: float
    title: str
    category: str
    urgency: str


@dataclass
class ClassifyOutcome:
    """Result of the remote classification stage."""
    ok: bool
    result: Optional[AnalysisResult] = None
    error: Optional[Exception] = None


@dataclass
class SubmissionResult:
    """Outcome of a complaint submission."""
    analysis: AnalysisResult
    duration: float  # seconds spent classifying
    marker: MapMarker
    complaint_id: Optional[str] = None
