from datetime import datetime
from mentorship_engine.common.mentorship_enums import ProgramStatus, TaskStatus, TaskType
from mentorship_engine.dto.base_dto import BaseDto


class ProgramDto(BaseDto):
    program_id: int
    mentorship_id: int
    cycle_id: int
    week: int
    status: ProgramStatus
    started_at: datetime
    completed_at: datetime | None = None


class TaskDto(BaseDto):
    task_id: int
    mentorship_id: int
    program_id: int
    week: int
    title: str
    description: str | None = None
    type: TaskType
    status: TaskStatus
    is_generated: bool
    due_date: datetime | None = None
    mentor_feedback: str | None = None
    completed_at: datetime | None = None


class ProgressDto(BaseDto):
    mentorship_id: int
    program_id: int
    week: int
    tasks_completed: int
    total_tasks: int
    engagement_score: float
    skill_improvement: float | None = None
