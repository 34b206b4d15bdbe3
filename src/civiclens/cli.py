"""Command-line interface for CivicLens."""

import argparse
import logging
import subprocess
import sys
from pathlib import Path

from .core.config import settings
from .core.constants import FileConstants, SAMPLE_COMPLAINTS
from .core.errors import ComplaintStoreError, StorageError, SubmissionRejected
from .services.complaint_store import sync_analytics, unique_locations
from .services.intake import create_intake
from .utils.data_prep import export_to_json, prepare_export
from .utils.formatting import format_category_name, format_time, issue_icon

logger = logging.getLogger(__name__)


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT
    )


def print_stats(analytics):
    """Print the dashboard numbers."""
    total = analytics.total_issues()
    top = analytics.top_category()
    
    print(f"Total issues: {total}")
    if total:
        print(f"Top category: {format_category_name(top)} ({analytics.category_counts[top]} reports)")
    else:
        print("Top category: -- (No data yet)")
    print(f"Critical/high: {analytics.critical_count()}")
    
    print("\nCategories:")
    for key, count, pct in analytics.category_bars():
        bar = "#" * int(round(pct / 5))
        print(f"  {key:<15} {count:>4}  {pct:5.1f}%  {bar}")
    
    feed = analytics.feed()
    print("\nRecent issues:")
    if not feed:
        print("  No issues reported yet.")
    for issue in feed:
        print(f"  {issue_icon(issue.category)} [{issue.urgency}] {issue.summary}... ({format_time(issue.timestamp)})")


def cmd_analyze(args):
    """Analyze command."""
    intake = create_intake(args.storage)
    text = SAMPLE_COMPLAINTS[args.sample] if args.sample else args.text
    
    try:
        result = intake.submit(text, args.location or "", args.lat, args.lng)
    except SubmissionRejected as e:
        print(f"Rejected: {e.message}")
        if e.context.get("remaining"):
            print(f"Try again in {e.context['remaining']}")
        return 2
    
    analysis = result.analysis
    print(f"Category: {analysis.category}")
    print(f"Sentiment: {analysis.sentiment}")
    print(f"Urgency: {analysis.urgency} ({analysis.urgency_score}/100)")
    print(f"Summary: {analysis.summary}")
    print("Recommendations:")
    for rec in analysis.recommendations:
        print(f"  - {rec}")
    print(f"Analyzed in {result.duration}s")
    if result.complaint_id:
        print(f"Saved as {result.complaint_id}")
    
    if args.out:
        export_to_json({"analysis": analysis.to_dict(), "metadata": {}}, args.out)
        print(f"Results exported to {args.out}")
    return 0


def cmd_stats(args):
    """Stats command."""
    intake = create_intake(args.storage)
    print_stats(intake.analytics)
    return 0


def cmd_sync(args):
    """Rebuild local analytics from the remote store."""
    intake = create_intake(args.storage)
    if not intake.store.is_remote:
        print("Remote store not configured; nothing to sync.")
        return 1
    complaints = sync_analytics(intake.store, intake.analytics, args.limit)
    print(f"Synced {len(complaints)} complaints from {unique_locations(complaints)} locations")
    print_stats(intake.analytics)
    return 0


def cmd_clear(args):
    """Clear command."""
    intake = create_intake(args.storage)
    intake.analytics.clear()
    print("Analytics data cleared")
    if args.remote:
        intake.store.clear_all()
        print("Remote complaints deleted")
    return 0


def cmd_export(args):
    """Export command."""
    intake = create_intake(args.storage)
    complaints = intake.store.load_complaints() if intake.store.is_remote else []
    export_to_json(prepare_export(intake.analytics, complaints), args.out)
    print(f"Exported to {args.out}")
    return 0


def cmd_ui(args):
    """UI command."""
    app_path = Path(__file__).parent / "ui" / "streamlit_app.py"
    
    if not app_path.exists():
        print(f"Streamlit app not found at {app_path}")
        return 1
    
    print("Launching CivicLens UI...")
    try:
        subprocess.run([
            sys.executable, "-m", "streamlit", "run", str(app_path)
        ], check=True)
    except subprocess.CalledProcessError as e:
        print(f"Failed to launch UI: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nUI stopped by user")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(description="CivicLens - Civic Issue Detection")
    parser.add_argument('--storage', help='Local storage directory (default from settings)')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')
    
    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Analyze and track a complaint')
    analyze_parser.add_argument('text', nargs='?', default='', help='Complaint text')
    analyze_parser.add_argument('--sample', choices=sorted(SAMPLE_COMPLAINTS), help='Use a sample complaint')
    analyze_parser.add_argument('--location', help='Location description')
    analyze_parser.add_argument('--lat', type=float, help='Latitude of the issue')
    analyze_parser.add_argument('--lng', type=float, help='Longitude of the issue')
    analyze_parser.add_argument('--out', help='Output JSON file')
    
    # Stats command
    subparsers.add_parser('stats', help='Show dashboard statistics')
    
    # Sync command
    sync_parser = subparsers.add_parser('sync', help='Rebuild statistics from the remote store')
    sync_parser.add_argument('--limit', type=int, default=50, help='Number of recent complaints to load')
    
    # Clear command
    clear_parser = subparsers.add_parser('clear', help='Clear local statistics')
    clear_parser.add_argument('--remote', action='store_true', help='Also delete remote complaints')
    
    # Export command
    export_parser = subparsers.add_parser('export', help='Export dashboard snapshot')
    export_parser.add_argument('--out', required=True, help='Output JSON file')
    
    # UI command
    subparsers.add_parser('ui', help='Launch web UI')
    
    return parser


COMMANDS = {
    'analyze': cmd_analyze,
    'stats': cmd_stats,
    'sync': cmd_sync,
    'clear': cmd_clear,
    'export': cmd_export,
    'ui': cmd_ui,
}


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    
    if not args.command:
        parser.print_help()
        return 0
    
    setup_logging()
    
    try:
        return COMMANDS[args.command](args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130
    except (StorageError, ComplaintStoreError) as e:
        logger.error(f"Command failed: {e.message}")
        return 1
    except Exception as e:
        logger.error(f"Command failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
