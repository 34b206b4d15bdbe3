"""Data preparation for export."""

import json
from typing import Dict, Any, List, Optional

from ..core.constants import AnalyticsConstants
from ..core.analytics import IssueAnalytics


def prepare_export(
    analytics: IssueAnalytics,
    complaints: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """Prepare a dashboard snapshot for JSON export."""
    
    top = analytics.top_category()
    
    export_data = {
        "summary": {
            "total": analytics.total_issues(),
            "top_category": top,
            "top_category_count": analytics.category_counts.get(top, 0),
            "critical": analytics.critical_count(),
            "categories": analytics.category_counts,
            "category_percentages": {
                key: round(pct, 1) for key, _, pct in analytics.category_bars()
            },
            "urgency": analytics.urgency_counts,
        },
        "recent_issues": [
            {
                "id": issue.id,
                "category": issue.category,
                "urgency": issue.urgency,
                "summary": issue.summary,
                "timestamp": issue.timestamp,
            }
            for issue in analytics.recent_issues
        ],
        "complaints": complaints or [],
        "metadata": {
            "export_timestamp": None,  # Will be set by caller
            "storage_key": AnalyticsConstants.STORAGE_KEY,
        }
    }
    
    return export_data


def export_to_json(data: Dict[str, Any], filename: str) -> None:
    """Export data to JSON file."""
    import datetime
    
    # Add timestamp
    data.setdefault("metadata", {})["export_timestamp"] = datetime.datetime.now().isoformat()
    
    with open(filename, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=str)
