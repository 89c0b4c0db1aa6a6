from dataclasses import dataclass, field
from mentorship_engine.common.user_role import UserRole


@dataclass
class UserContextDto:
    user_id: int
    roles: list[UserRole] = field(default_factory=list)

    def has_role(self, role: UserRole) -> bool:
        return role in self.roles
