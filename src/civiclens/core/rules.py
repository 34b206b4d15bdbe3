"""Keyword tables for local classification and category normalization.

Every table here is an ordered sequence evaluated first-match-wins, so
the order of entries is part of the behaviour.
"""

from typing import Dict, List, Tuple


# (keywords, category, urgency, urgency_score)
CLASSIFICATION_RULES: List[Tuple[Tuple[str, ...], str, str, int]] = [
    (("pothole", "road", "bridge"), "Infrastructure", "high", 75),
    (("light", "electric", "power"), "Utilities", "medium", 60),
    (("garbage", "trash", "waste"), "Sanitation", "high", 70),
    (("noise", "loud"), "Noise", "medium", 45),
    (("unsafe", "danger", "accident"), "Safety", "critical", 90),
]

DEFAULT_CLASSIFICATION: Tuple[str, str, int] = ("Other", "medium", 50)

# Applied after the category rules and always wins.
URGENCY_OVERRIDE_KEYWORDS: Tuple[str, ...] = ("emergency", "immediate", "urgent")
URGENCY_OVERRIDE: Tuple[str, int] = ("critical", 95)

LOCAL_SENTIMENT = "negative"

CANNED_RESPONSES: Dict[str, Dict[str, object]] = {
    "Infrastructure": {
        "summary": (
            "Infrastructure damage reported that requires immediate attention from municipal authorities. "
            "This issue poses potential safety risks to commuters."
        ),
        "recommendations": [
            "Dispatch road maintenance team for immediate assessment",
            "Place warning signs and barriers around the affected area",
            "Schedule permanent repair within 48 hours",
        ],
    },
    "Utilities": {
        "summary": (
            "Utility service disruption affecting public safety and convenience. "
            "Non-functional street lighting creates security concerns."
        ),
        "recommendations": [
            "Log complaint with electricity department",
            "Deploy temporary lighting solution",
            "Schedule repair by electrical maintenance team",
        ],
    },
    "Sanitation": {
        "summary": (
            "Waste management issue causing environmental and health concerns in the area. "
            "Immediate cleanup required."
        ),
        "recommendations": [
            "Dispatch sanitation team for immediate cleanup",
            "Increase garbage collection frequency in the area",
            "Install additional waste bins if needed",
        ],
    },
    "Noise": {
        "summary": (
            "Noise disturbance complaint indicating potential violation of local noise ordinances. "
            "Affects quality of life for residents."
        ),
        "recommendations": [
            "Issue noise violation warning to responsible party",
            "Schedule inspection during peak noise hours",
            "Enforce noise regulation compliance",
        ],
    },
    "Safety": {
        "summary": (
            "Safety hazard identified that requires urgent attention. "
            "Risk of injury or property damage if not addressed promptly."
        ),
        "recommendations": [
            "Deploy emergency response team immediately",
            "Secure the affected area with barriers",
            "Notify relevant emergency services",
        ],
    },
    "Other": {
        "summary": "General civic issue reported that requires review and appropriate action by local authorities.",
        "recommendations": [
            "Review and categorize the complaint",
            "Assign to appropriate department",
            "Follow up within 3 business days",
        ],
    },
}

# (substring, category key) for mapping free-text categories onto dashboard keys
CATEGORY_NORMALIZATION: List[Tuple[str, str]] = [
    ("infrastructure", "infrastructure"),
    ("road", "infrastructure"),
    ("pothole", "infrastructure"),
    ("sidewalk", "infrastructure"),
    ("safety", "safety"),
    ("crime", "safety"),
    ("sanitation", "sanitation"),
    ("garbage", "sanitation"),
    ("trash", "sanitation"),
    ("waste", "sanitation"),
    ("utilities", "utilities"),
    ("electricity", "utilities"),
    ("water", "utilities"),
    ("streetlight", "utilities"),
    ("noise", "noise"),
]

CATEGORY_ICONS = {
    "infrastructure": "🛣️",
    "safety": "🚨",
    "sanitation": "🗑️",
    "utilities": "💡",
    "noise": "🔊",
    "other": "📦",
}

ISSUE_ICONS = {
    "Infrastructure": "🛣️",
    "Safety": "🚨",
    "Sanitation": "🗑️",
    "Utilities": "💡",
    "Noise": "🔊",
}
DEFAULT_ISSUE_ICON = "📋"


def match_classification_rule(text_lower: str) -> Tuple[str, str, int]:
    """Return (category, urgency, score) for the first rule whose keywords appear."""
    for keywords, category, urgency, score in CLASSIFICATION_RULES:
        if any(keyword in text_lower for keyword in keywords):
            return category, urgency, score
    return DEFAULT_CLASSIFICATION


def canned_response(category: str) -> Dict[str, object]:
    """Canned summary/recommendations; unknown categories (e.g. Environment) use Other."""
    return CANNED_RESPONSES.get(category, CANNED_RESPONSES["Other"])


def normalize_category(category) -> str:
    """Map a free-text category onto one of the six dashboard keys."""
    if not isinstance(category, str):
        return "other"
    normalized = category.lower().strip()
    for keyword, key in CATEGORY_NORMALIZATION:
        if keyword in normalized:
            return key
    return "other"
