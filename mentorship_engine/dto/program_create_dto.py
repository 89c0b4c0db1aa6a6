from mentorship_engine.dto.base_dto import BaseRequestDto


class ProgramCreateDto(BaseRequestDto):
    cycle_id: int
