from datetime import date, datetime
from mentorship_engine.common.mentorship_enums import CycleStatus
from mentorship_engine.dto.base_dto import BaseDto


class CycleDto(BaseDto):
    cycle_id: int
    name: str
    description: str | None = None
    start_date: date
    end_date: date
    status: CycleStatus
    max_mentorships: int
    reserved_mentorships: int = 0
    launched_at: datetime | None = None
    completed_at: datetime | None = None
