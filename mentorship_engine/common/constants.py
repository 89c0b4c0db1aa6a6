from enum import Enum

from mentorship_engine.common.mentorship_enums import TaskType

# Matching
DEFAULT_MIN_MATCH_SCORE = 70.0
MAX_MATCH_SCORE = 100.0
DEFAULT_MATCHING_CHUNK_SIZE = 50


class ScoreComponent(float, Enum):
    """Upper bound of each sub-score; the bounds add up to MAX_MATCH_SCORE."""

    SKILL_MATCH = 35.0
    INDUSTRY_RELEVANCE = 20.0
    AVAILABILITY_MATCH = 20.0
    COMMUNICATION_MATCH = 15.0
    PERSONALITY_FIT = 10.0


# Neutral values used when a profile carries no signal for a component.
NEUTRAL_SKILL_MATCH = 17.5
NEUTRAL_INDUSTRY_RELEVANCE = 10.0
MISMATCH_INDUSTRY_RELEVANCE = 5.0
INDUSTRY_RELEVANCE_PER_HIT = 5.0
NEUTRAL_AVAILABILITY_MATCH = 10.0
NEUTRAL_COMMUNICATION_MATCH = 8.0
NEUTRAL_PERSONALITY_FIT = 5.0

# Program
DAYS_PER_PROGRAM_WEEK = 7

WEEKLY_TASK_TEMPLATES = (
    (
        TaskType.LEARNING,
        "Week {week} Learning Task",
        "Complete the learning module for week {week}",
    ),
    (
        TaskType.PRACTICE,
        "Week {week} Practice Task",
        "Practice the skills learned this week",
    ),
    (
        TaskType.REFLECTION,
        "Week {week} Reflection",
        "Reflect on your progress and challenges",
    ),
)

# Certificates
CERTIFICATE_NUMBER_TEMPLATE = "CERT-{issued:%Y%m%d%H%M%S}-{mentorship_id:08d}"

# Notifications
NOTIFICATION_QUEUE_KEY = "mentorship:notifications"
NOTIFICATION_PROCESSING_KEY = "mentorship:notifications:processing"
NOTIFICATION_DEAD_LETTER_KEY = "mentorship:notifications:dead"
DEFAULT_NOTIFICATION_PUBLISH_TIMEOUT_SECONDS = 2.0
NOTIFICATION_POLL_TIMEOUT_SECONDS = 5
