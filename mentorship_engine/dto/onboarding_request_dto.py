from mentorship_engine.common.mentorship_enums import ParticipantRole
from mentorship_engine.dto.base_dto import BaseRequestDto


class OnboardingRequestDto(BaseRequestDto):
    target_role: ParticipantRole
    cycle_id: int | None = None
