"""Complaint submission flow: gates, classification, tracking and storage."""

import logging
import time
from typing import Optional

from ..core.analytics import IssueAnalytics
from ..core.constants import IntakeConstants
from ..core.errors import StorageError, SubmissionRejected
from ..core.models import SubmissionResult
from ..utils.map_data import marker_for_analysis
from .complaint_store import ComplaintStore, create_complaint_store
from .llm import ComplaintClassifier, LLMServiceFactory
from .storage import CooldownGate, LocalStorage

logger = logging.getLogger(__name__)


class ComplaintIntake:
    """Handles one complaint form submission at a time."""
    
    def __init__(
        self,
        classifier: ComplaintClassifier,
        analytics: IssueAnalytics,
        cooldown: CooldownGate,
        store: Optional[ComplaintStore] = None,
    ):
        self.classifier = classifier
        self.analytics = analytics
        self.cooldown = cooldown
        self.store = store
    
    def submit(
        self,
        complaint: str,
        location: str = "",
        lat: Optional[float] = None,
        lng: Optional[float] = None,
    ) -> SubmissionResult:
        """Classify and track a complaint. Raises SubmissionRejected for refused input."""
        if self.cooldown.is_active():
            raise SubmissionRejected(
                "Please wait for the cooldown to finish before submitting another complaint.",
                error_code="cooldown",
                context={"remaining": self.cooldown.format_remaining()},
            )
        if lat is None or lng is None:
            raise SubmissionRejected("Please detect your location first.", error_code="no_location")
        
        complaint = (complaint or "").strip()[:IntakeConstants.MAX_COMPLAINT_LENGTH]
        if not complaint:
            raise SubmissionRejected("Please enter a complaint", error_code="empty")
        
        start_time = time.time()
        analysis = self.classifier.analyze(complaint, location)
        duration = round(time.time() - start_time, 1)
        
        try:
            self.analytics.record(analysis, complaint)
        except StorageError as e:
            logger.error(f"Could not persist analytics: {e}")
        
        marker = marker_for_analysis(analysis, lat, lng)
        
        complaint_id = None
        if self.store is not None and self.store.is_connected:
            complaint_id = self.store.save_complaint(analysis, complaint, location, lat, lng)
        
        try:
            self.cooldown.start()
        except StorageError as e:
            logger.error(f"Could not start cooldown: {e}")
        
        logger.info(f"Complaint analyzed in {duration}s as {analysis.category}/{analysis.urgency}")
        return SubmissionResult(
            analysis=analysis,
            duration=duration,
            marker=marker,
            complaint_id=complaint_id,
        )


def create_intake(storage_dir: Optional[str] = None, store: Optional[ComplaintStore] = None) -> ComplaintIntake:
    """Wire up an intake with its own storage, analytics and classifier."""
    storage = LocalStorage(storage_dir)
    return ComplaintIntake(
        classifier=LLMServiceFactory.create(),
        analytics=IssueAnalytics(storage),
        cooldown=CooldownGate(storage),
        store=store if store is not None else create_complaint_store(),
    )
