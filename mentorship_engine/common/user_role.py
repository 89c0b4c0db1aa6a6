from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    MENTORSHIP = "mentorship"
    CRON_RUNNER = "cronRunner"

    @classmethod
    def parse_header(cls, raw_roles: str | None) -> tuple[list["UserRole"], list[str]]:
        """
        Split a comma-separated role header.

        Returns:
            tuple: The known roles in header order, and the names that matched
                no role.
        """
        roles, unknown = [], []
        for name in (raw_roles or "").split(","):
            name = name.strip()
            if not name:
                continue
            try:
                roles.append(cls(name))
            except ValueError:
                unknown.append(name)
        return roles, unknown
