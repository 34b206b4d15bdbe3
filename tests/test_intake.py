"""Tests for the complaint submission flow."""

from unittest.mock import Mock

import pytest

from civiclens.core.analytics import IssueAnalytics
from civiclens.core.constants import IntakeConstants, SAMPLE_COMPLAINTS
from civiclens.core.errors import StorageError, SubmissionRejected
from civiclens.services.complaint_store import ComplaintStore, InMemoryComplaintStore
from civiclens.services.intake import ComplaintIntake
from civiclens.services.llm import ComplaintClassifier
from civiclens.services.storage import CooldownGate, LocalStorage


@pytest.fixture
def storage(tmp_path):
    store = LocalStorage(str(tmp_path / "storage"))
    yield store
    store.close()


def make_intake(storage, store=None, disabled=False):
    return ComplaintIntake(
        classifier=ComplaintClassifier(),
        analytics=IssueAnalytics(storage),
        cooldown=CooldownGate(storage, interval_seconds=3600, disabled=disabled),
        store=store,
    )


class TestRejections:
    """Submissions refused before classification."""

    def test_missing_location(self, storage):
        intake = make_intake(storage)
        with pytest.raises(SubmissionRejected) as exc_info:
            intake.submit("Broken road", lat=None, lng=77.0)
        assert exc_info.value.error_code == "no_location"
        assert intake.analytics.total_issues() == 0

    def test_empty_complaint(self, storage):
        intake = make_intake(storage)
        with pytest.raises(SubmissionRejected) as exc_info:
            intake.submit("   ", lat=12.0, lng=77.0)
        assert exc_info.value.error_code == "empty"

    def test_cooldown_blocks_second_submission(self, storage):
        intake = make_intake(storage)
        intake.submit(SAMPLE_COMPLAINTS["garbage"], lat=12.0, lng=77.0)

        with pytest.raises(SubmissionRejected) as exc_info:
            intake.submit(SAMPLE_COMPLAINTS["noise"], lat=12.0, lng=77.0)
        assert exc_info.value.error_code == "cooldown"
        assert exc_info.value.context["remaining"].endswith("s")
        assert intake.analytics.total_issues() == 1

    def test_disabled_cooldown_allows_repeats(self, storage):
        intake = make_intake(storage, disabled=True)
        intake.submit("Loud music every night", lat=12.0, lng=77.0)
        intake.submit("Loud music again", lat=12.0, lng=77.0)
        assert intake.analytics.category_counts["noise"] == 2


class TestSubmit:
    """Successful submissions."""

    def test_classifies_and_tracks(self, storage):
        intake = make_intake(storage)
        result = intake.submit(SAMPLE_COMPLAINTS["pothole"], "MG Road", 12.97, 77.59)

        assert result.analysis.category == "Infrastructure"
        assert result.duration >= 0
        assert result.complaint_id is None
        assert intake.analytics.category_counts["infrastructure"] == 1
        assert intake.analytics.recent_issues[0].category == "Infrastructure"
        assert intake.cooldown.is_active()

    def test_marker(self, storage):
        intake = make_intake(storage)
        result = intake.submit("Trash everywhere near the park", lat=12.5, lng=77.25)

        marker = result.marker
        assert (marker.latitude, marker.longitude) == (12.5, 77.25)
        assert marker.category == "sanitation"
        assert marker.urgency == "high"
        assert marker.title == result.analysis.summary[:IntakeConstants.MARKER_TITLE_LENGTH] + "..."

    def test_long_complaint_is_truncated(self, storage):
        store = InMemoryComplaintStore()
        intake = make_intake(storage, store=store)
        intake.submit("pothole " * 200, lat=1.0, lng=1.0)

        saved = store.load_complaints()[0]
        assert len(saved["complaint"]) == IntakeConstants.MAX_COMPLAINT_LENGTH

    def test_saves_to_connected_store(self, storage):
        store = InMemoryComplaintStore()
        intake = make_intake(storage, store=store)
        result = intake.submit("Garbage not collected", "Sector 5", 28.6, 77.2)

        assert result.complaint_id is not None
        saved = store.load_complaints()
        assert saved[0]["id"] == result.complaint_id
        assert saved[0]["location"] == "Sector 5"

    def test_disconnected_store_is_skipped(self, storage):
        store = Mock(spec=ComplaintStore)
        store.is_connected = False
        intake = make_intake(storage, store=store)
        result = intake.submit("Garbage not collected", lat=28.6, lng=77.2)

        store.save_complaint.assert_not_called()
        assert result.complaint_id is None

    def test_analytics_write_failure_does_not_abort(self, storage):
        intake = make_intake(storage)
        intake.analytics.storage = Mock()
        intake.analytics.storage.set_item.side_effect = StorageError("write", "k", OSError("disk full"))

        result = intake.submit("Garbage not collected", lat=28.6, lng=77.2)

        assert result.analysis.category == "Sanitation"
        assert intake.analytics.total_issues() == 0
        assert intake.cooldown.is_active()
