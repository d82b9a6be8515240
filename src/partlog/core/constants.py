"""Application-wide constants.

This module defines constants used throughout the application
to avoid magic numbers and ensure consistency.
"""

# Change set value bounds
MAX_STRING_LENGTH = 2000
TRUNCATION_MARKER = "..."

# Comment ("reason for change") length
MAX_COMMENT_LENGTH = 255

# String field lengths
MAX_NAME_LENGTH = 255
MAX_EMAIL_LENGTH = 255
MAX_TARGET_TYPE_LENGTH = 64
MAX_LOG_TYPE_LENGTH = 32

# Keys used in Session.info
SUBSCRIBER_INFO_KEY = "partlog_event_logger"
FLUSH_CYCLE_INFO_KEY = "partlog_flush_cycle"
COMMENT_INFO_KEY = "partlog_event_comment"
ACTOR_INFO_KEY = "partlog_event_actor"
