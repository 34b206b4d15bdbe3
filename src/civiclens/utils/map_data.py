"""Map pins for the issue map widget."""

from typing import Any, Dict, Iterable, List

from ..core.constants import AnalyticsConstants, IntakeConstants, MapConstants
from ..core.models import AnalysisResult, MapMarker


def marker_title(summary) -> str:
    if not summary:
        return "Issue"
    return summary[:IntakeConstants.MARKER_TITLE_LENGTH] + "..."


def marker_color(urgency: str) -> str:
    return MapConstants.URGENCY_COLORS.get(urgency, MapConstants.DEFAULT_COLOR)


def marker_for_analysis(analysis: AnalysisResult, lat: float, lng: float) -> MapMarker:
    return MapMarker(
        latitude=lat,
        longitude=lng,
        title=marker_title(analysis.summary),
        category=analysis.category.lower(),
        urgency=analysis.urgency,
    )


def markers_from_complaints(records: Iterable[Dict[str, Any]]) -> List[MapMarker]:
    """Pins for stored complaints that carry coordinates."""
    markers = []
    for record in records:
        lat, lng = record.get("lat"), record.get("lng")
        if not lat or not lng:
            continue
        markers.append(MapMarker(
            latitude=float(lat),
            longitude=float(lng),
            title=marker_title(record.get("summary")),
            category=(record.get("category") or AnalyticsConstants.DEFAULT_CATEGORY).lower(),
            urgency=(record.get("urgency") or AnalyticsConstants.DEFAULT_URGENCY).lower(),
        ))
    return markers


def filter_by_category(markers: Iterable[MapMarker], category: str) -> List[MapMarker]:
    if category == "all":
        return list(markers)
    return [m for m in markers if m.category == category]


def markers_to_rows(markers: Iterable[MapMarker]) -> List[Dict[str, Any]]:
    """Rows for a DataFrame handed to the map widget."""
    return [
        {
            "latitude": m.latitude,
            "longitude": m.longitude,
            "title": m.title,
            "category": m.category,
            "urgency": m.urgency,
            "color": marker_color(m.urgency),
        }
        for m in markers
    ]
