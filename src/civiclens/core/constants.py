"""Constants and configuration values for CivicLens."""

# Analytics Constants
class AnalyticsConstants:
    """Constants for the local statistics dashboard."""
    
    STORAGE_KEY = "civicLens_analytics"  # durable storage key for the aggregate
    MAX_RECENT_ISSUES = 20  # recency buffer capacity
    SUMMARY_MAX_LENGTH = 100  # stored summary truncation
    FEED_DISPLAY_LIMIT = 10  # issues shown in the recent feed
    NO_DATA = "no data"  # top category when nothing is recorded
    NO_SUMMARY = "No summary"  # placeholder for stored records without one
    
    CATEGORY_KEYS = ("infrastructure", "safety", "sanitation", "utilities", "noise", "other")
    URGENCY_KEYS = ("critical", "high", "medium", "low")
    DEFAULT_CATEGORY = "other"
    DEFAULT_URGENCY = "medium"

# Cooldown Constants
class CooldownConstants:
    """Constants for the submission rate limit."""
    
    STORAGE_KEY = "civicLens_lastSubmit"  # last submit epoch milliseconds
    DEFAULT_SECONDS = 60 * 60  # one hour

# Intake Constants
class IntakeConstants:
    """Constants for the complaint form."""
    
    MAX_COMPLAINT_LENGTH = 500  # chars accepted from the text area
    MARKER_TITLE_LENGTH = 50  # chars of summary used as a map pin title

# Prompt Constants
class PromptConstants:
    """Constants for LLM prompts and templates."""
    
    # Prompt Versions (for cache invalidation)
    ANALYSIS_PROMPT_VERSION = "v1.0"
    
    CATEGORIES = ("Infrastructure", "Safety", "Sanitation", "Utilities", "Noise", "Environment", "Other")
    SENTIMENTS = ("positive", "neutral", "negative")
    URGENCIES = ("low", "medium", "high", "critical")
    MIN_URGENCY_SCORE = 1
    MAX_URGENCY_SCORE = 100

# Cache Constants
class CacheConstants:
    """Constants for caching behavior."""
    
    CACHE_KEY_LENGTH = 8  # length of cache key for logging

# File and Path Constants
class FileConstants:
    """Constants for file operations."""
    
    CACHE_DIR = "cache/llm_cache"  # cache directory
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Map Constants
class MapConstants:
    """Constants for the issue map."""
    
    DEFAULT_LATITUDE = 20.5937  # centre of India
    DEFAULT_LONGITUDE = 78.9629
    DEFAULT_ZOOM = 5
    LOCATION_ROUNDING = 2  # decimals used to approximate a city
    
    URGENCY_COLORS = {
        'critical': '#ef4444',
        'high': '#f59e0b',
        'medium': '#3b82f6',
        'low': '#22c55e',
    }
    DEFAULT_COLOR = '#3b82f6'

# Sample complaints for the demo form
SAMPLE_COMPLAINTS = {
    "pothole": (
        "There's a massive pothole on MG Road near the central market that has been causing accidents. "
        "Multiple vehicles have been damaged and it's getting worse with the rain."
    ),
    "streetlight": (
        "The streetlight outside Block C of the university campus has been out for two weeks now. "
        "The area is completely dark at night and students feel unsafe walking there."
    ),
    "garbage": (
        "Garbage has been piling up at the corner of Park Street and 5th Avenue for over a week. "
        "The smell is unbearable and it's attracting stray animals."
    ),
    "noise": (
        "Construction work at the new building site continues well past 10 PM every night, "
        "violating noise regulations and disturbing residents in the area."
    ),
}
