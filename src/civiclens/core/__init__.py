"""Core modules for CivicLens."""

from .models import *
from .config import settings
from .analytics import IssueAnalytics
from .errors import CivicLensError, ClassifyError, StorageError, ComplaintStoreError, SubmissionRejected

__all__ = [
    "settings",
    "IssueAnalytics",
    "AnalysisResult",
    "RecentIssue",
    "AggregateState",
    "StoredComplaint",
    "MapMarker",
    "ClassifyOutcome",
    "SubmissionResult",
    "CivicLensError",
    "ClassifyError",
    "StorageError",
    "ComplaintStoreError",
    "SubmissionRejected",
]
