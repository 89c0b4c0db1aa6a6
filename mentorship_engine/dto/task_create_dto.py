from datetime import datetime
from pydantic import Field
from mentorship_engine.common.mentorship_enums import TaskType
from mentorship_engine.dto.base_dto import BaseRequestDto


class TaskCreateDto(BaseRequestDto):
    week: int = Field(ge=1)
    type: TaskType = TaskType.CUSTOM
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    due_date: datetime | None = None


class TaskCompleteDto(BaseRequestDto):
    feedback: str | None = None
