"""
Cognitive alert thresholds. Compile-time constants; not user-tunable.
"""

_MINUTE_MS = 60 * 1000
_HOUR_MS = 60 * _MINUTE_MS

# Continuous focus on the same task before the excessive-time alert
EXCESSIVE_TIME_THRESHOLD_MS = 60 * _MINUTE_MS
# Users whose focus preference exceeds the default get a longer window
ADVANCED_EXCESSIVE_TIME_THRESHOLD_MS = 90 * _MINUTE_MS
DEFAULT_FOCUS_DURATION_MINUTES = 25

# Focus sessions completed in a row without a break
MISSING_BREAK_SESSIONS_THRESHOLD = 3

# Navigating without recording any action
PROLONGED_NAVIGATION_THRESHOLD_MS = 20 * _MINUTE_MS

# Minimum spacing between any two alerts
MIN_ALERT_INTERVAL_MS = 20 * _MINUTE_MS

# Alert history older than this is dropped on load (fresh day)
ALERT_HISTORY_RESET_MS = 24 * _HOUR_MS

# How long a dismissed banner stays snoozed
ALERT_DISMISS_EXPIRY_MS = 2 * _HOUR_MS
