from enum import Enum


class CycleStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"


class ParticipantRole(str, Enum):
    MENTOR = "mentor"
    MENTEE = "mentee"


class InterestStatus(str, Enum):
    INTERESTED = "interested"
    WITHDRAWN = "withdrawn"


class MatchStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class MentorshipStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProgramStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TaskType(str, Enum):
    LEARNING = "learning"
    PRACTICE = "practice"
    REFLECTION = "reflection"
    CUSTOM = "custom"


class EvaluationType(str, Enum):
    MID_PROGRAM = "mid_program"
    FINAL = "final"


class ScoreSource(str, Enum):
    """Which evaluation checkpoint produced a completed mentorship's scores."""

    FINAL = "final"
    MID_PROGRAM = "mid_program"


class MentorshipTheme(str, Enum):
    CAREER_DEVELOPMENT = "career_development"
    TECHNOLOGY = "technology"
    ENTREPRENEURSHIP = "entrepreneurship"
    LEADERSHIP = "leadership"
    ACADEMIC = "academic"
    PERSONAL_GROWTH = "personal_growth"
    CREATIVE_ARTS = "creative_arts"
    FINANCE = "finance"


class CommunicationMedium(str, Enum):
    VIDEO = "video"
    CHAT = "chat"
    TASKS = "tasks"
    IN_PERSON = "in_person"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class NotificationType(str, Enum):
    CYCLE_LAUNCHED = "cycle_launched"
    MATCH_PROPOSED = "match_proposed"
    MATCH_APPROVED = "match_approved"
    MATCH_REJECTED = "match_rejected"
    MENTORSHIP_STARTED = "mentorship_started"
    MENTORSHIP_COMPLETED = "mentorship_completed"
    MENTORSHIP_CANCELLED = "mentorship_cancelled"
    TASKS_ASSIGNED = "tasks_assigned"
    CERTIFICATE_ISSUED = "certificate_issued"
    ONBOARDING = "onboarding"
