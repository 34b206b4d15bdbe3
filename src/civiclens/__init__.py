"""CivicLens - AI-assisted civic complaint intake and issue dashboard."""

__version__ = "1.0.0"
__author__ = "CivicLens Team"

from .core.models import *
from .core.config import settings
from .core.analytics import IssueAnalytics
from .services.llm import LLMServiceFactory, ComplaintClassifier

__all__ = [
    "settings",
    "IssueAnalytics",
    "LLMServiceFactory",
    "ComplaintClassifier",
]
