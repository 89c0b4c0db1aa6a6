from datetime import date
from pydantic import Field, model_validator
from mentorship_engine.dto.base_dto import BaseRequestDto


class CycleCreateDto(BaseRequestDto):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_date: date
    end_date: date
    max_mentorships: int = Field(ge=1)

    @model_validator(mode="after")
    def check_window(self):
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self
