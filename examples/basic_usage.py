"""Basic usage examples for CivicLens."""

import tempfile

from civiclens import IssueAnalytics, LLMServiceFactory
from civiclens.core.constants import SAMPLE_COMPLAINTS
from civiclens.services.complaint_store import InMemoryComplaintStore, sync_analytics
from civiclens.services.intake import ComplaintIntake
from civiclens.services.storage import CooldownGate, LocalStorage


def example_classify():
    """Example: classify one complaint."""
    print("🔍 Classifying the pothole sample")

    classifier = LLMServiceFactory.create()
    result = classifier.analyze(SAMPLE_COMPLAINTS["pothole"], "MG Road")

    print(f"🏷️ Category: {result.category}")
    print(f"⚠️ Urgency: {result.urgency} ({result.urgency_score}/100)")
    print(f"📝 Summary: {result.summary}")
    for rec in result.recommendations:
        print(f"  - {rec}")


def example_dashboard(storage_dir):
    """Example: submit every sample and read the dashboard numbers."""
    print("\n📊 Submitting all samples")

    storage = LocalStorage(storage_dir)
    store = InMemoryComplaintStore()
    intake = ComplaintIntake(
        classifier=LLMServiceFactory.create(),
        analytics=IssueAnalytics(storage),
        cooldown=CooldownGate(storage, disabled=True),
        store=store,
    )

    for key, text in SAMPLE_COMPLAINTS.items():
        submission = intake.submit(text, key, lat=28.61, lng=77.21)
        print(f"  {key}: {submission.analysis.category}/{submission.analysis.urgency}")

    analytics = intake.analytics
    print(f"📈 Total issues: {analytics.total_issues()}")
    print(f"🏆 Top category: {analytics.top_category()}")
    print(f"🚨 Critical/high: {analytics.critical_count()}")

    # Rebuilding from the store gives the same tallies
    sync_analytics(store, analytics)
    print(f"🔄 After sync: {analytics.category_counts}")
    storage.close()


if __name__ == "__main__":
    print("🚀 CivicLens Examples")
    print("=" * 50)

    with tempfile.TemporaryDirectory() as tmp:
        example_classify()
        example_dashboard(tmp)
    print("\n✅ All examples completed successfully!")
