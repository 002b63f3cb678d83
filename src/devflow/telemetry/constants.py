"""Constants for the activity telemetry engine.

Constants are organized by domain:
- Focus sessions
- Edit debouncing
- Task classification
- Record types and privacy data types
- Replay event names
- Config keys and logging
"""

from typing import Final

# =============================================================================
# Focus Sessions
# =============================================================================

DEFAULT_MIN_FOCUS_SESSION_SECONDS: Final[float] = 30.0
MIN_FOCUS_SESSION_SECONDS: Final[float] = 1.0
MAX_FOCUS_SESSION_SECONDS: Final[float] = 3600.0

# =============================================================================
# Edit Debouncing
# =============================================================================

DEFAULT_EDIT_INACTIVITY_SECONDS: Final[float] = 5.0
MIN_EDIT_INACTIVITY_SECONDS: Final[float] = 0.1
MAX_EDIT_INACTIVITY_SECONDS: Final[float] = 600.0

# =============================================================================
# Task Classification
# =============================================================================

BUILD_NAME_KEYWORDS: Final[tuple[str, ...]] = ("build", "compile")
TEST_NAME_KEYWORDS: Final[tuple[str, ...]] = ("test", "spec")

EXIT_CODE_SUCCESS: Final[int] = 0

# =============================================================================
# Record Types (sink method names, JSONL "type" field, consent mapping)
# =============================================================================

RECORD_DEBUG_SESSION: Final[str] = "debug_session"
RECORD_BUILD_EVENT: Final[str] = "build_event"
RECORD_TEST_RUN: Final[str] = "test_run"
RECORD_KEYSTROKE: Final[str] = "keystroke"
RECORD_FOCUS_TIME: Final[str] = "focus_time"
RECORD_TYPES: Final[tuple[str, ...]] = (
    RECORD_DEBUG_SESSION,
    RECORD_BUILD_EVENT,
    RECORD_TEST_RUN,
    RECORD_KEYSTROKE,
    RECORD_FOCUS_TIME,
)

# =============================================================================
# Privacy Data Types
# =============================================================================

DATA_TYPE_KEYSTROKES: Final[str] = "keystrokes"
DATA_TYPE_FILE_CHANGES: Final[str] = "file_changes"
DATA_TYPE_DEBUGGING: Final[str] = "debugging"
DATA_TYPE_FOCUS_TIME: Final[str] = "focus_time"
DATA_TYPE_BUILD_EVENTS: Final[str] = "build_events"
DATA_TYPE_TEST_EVENTS: Final[str] = "test_events"
DATA_TYPES: Final[tuple[str, ...]] = (
    DATA_TYPE_KEYSTROKES,
    DATA_TYPE_FILE_CHANGES,
    DATA_TYPE_DEBUGGING,
    DATA_TYPE_FOCUS_TIME,
    DATA_TYPE_BUILD_EVENTS,
    DATA_TYPE_TEST_EVENTS,
)

# Which consent data type gates which record type
RECORD_DATA_TYPES: Final[dict[str, str]] = {
    RECORD_DEBUG_SESSION: DATA_TYPE_DEBUGGING,
    RECORD_BUILD_EVENT: DATA_TYPE_BUILD_EVENTS,
    RECORD_TEST_RUN: DATA_TYPE_TEST_EVENTS,
    RECORD_KEYSTROKE: DATA_TYPE_KEYSTROKES,
    RECORD_FOCUS_TIME: DATA_TYPE_FOCUS_TIME,
}

DEFAULT_RETENTION_DAYS: Final[int] = 365
VALID_RETENTION_DAYS: Final[tuple[int, ...]] = (0, 30, 90, 180, 365, 730)
USER_ID_PREFIX: Final[str] = "user_"

# =============================================================================
# Replay Event Names
# =============================================================================

EVENT_WINDOW_FOCUS: Final[str] = "window_focus"
EVENT_ACTIVE_EDITOR: Final[str] = "active_editor"
EVENT_TEXT_CHANGE: Final[str] = "text_change"
EVENT_TASK_START: Final[str] = "task_start"
EVENT_TASK_END: Final[str] = "task_end"
EVENT_DIAGNOSTICS: Final[str] = "diagnostics"
EVENT_DEBUG_SESSION: Final[str] = "debug_session"

# =============================================================================
# Config Keys
# =============================================================================

TELEMETRY_CONFIG_KEY: Final[str] = "telemetry"
PRIVACY_CONFIG_KEY: Final[str] = "privacy"

# =============================================================================
# Logging
# =============================================================================

LOGGER_NAME: Final[str] = "devflow"

LOG_LEVEL_DEBUG: Final[str] = "DEBUG"
LOG_LEVEL_INFO: Final[str] = "INFO"
LOG_LEVEL_WARNING: Final[str] = "WARNING"
LOG_LEVEL_ERROR: Final[str] = "ERROR"
VALID_LOG_LEVELS: Final[tuple[str, ...]] = (
    LOG_LEVEL_DEBUG,
    LOG_LEVEL_INFO,
    LOG_LEVEL_WARNING,
    LOG_LEVEL_ERROR,
)

DEFAULT_LOG_ROTATION_ENABLED: Final[bool] = True
DEFAULT_LOG_MAX_SIZE_MB: Final[int] = 10
MIN_LOG_MAX_SIZE_MB: Final[int] = 1
MAX_LOG_MAX_SIZE_MB: Final[int] = 100
DEFAULT_LOG_BACKUP_COUNT: Final[int] = 3
MAX_LOG_BACKUP_COUNT: Final[int] = 10
