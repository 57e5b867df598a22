"""Constants for calboard.

This module centralizes all magic numbers and default values used throughout the application.
"""

# Event defaults
DEFAULT_EVENT_CATEGORY = "default"
DEFAULT_EVENT_STATUS = "upcoming"
UNTITLED_EVENT_TITLE = "Untitled Event"

# Working-hours window used by the free-slot finder (local wall-clock hours)
WORK_DAY_START_HOUR = 9
WORK_DAY_END_HOUR = 18
MIN_FREE_SLOT_MINUTES = 30

# Kanban bucketing
UPCOMING_HORIZON_DAYS = 14

# Column drops
COLUMN_DROP_HOUR = 9
BACKLOG_OFFSET_DAYS = 30

# Generation cache
CACHE_KEY_PROMPT_CHARS = 200
MOCK_CACHE_TTL_SEC = 60
LIVE_CACHE_TTL_SEC = 300

# Assistant prompts
WEEK_SUMMARY_EVENT_LIMIT = 15
FALLBACK_HIGHLIGHT_COUNT = 3
