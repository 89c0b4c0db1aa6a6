from starlette.datastructures import Headers

from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.user_context_dto import UserContextDto

USER_ID_HEADER = "X-User-Id"
USER_ROLES_HEADER = "X-User-Roles"


class AuthenticationService:
    """
    Builds the caller's context from the identity headers forwarded by the
    upstream gateway.

    The gateway has already authenticated the caller; this service only parses
    `X-User-Id` (integer user id) and `X-User-Roles` (comma-separated roles).
    Unknown role names are ignored.
    """

    def __init__(self, logger):
        """
        Initialize the AuthenticationService.

        Args:
            logger: A logger instance.
        """
        self.logger = logger

    def authenticate_request(self, headers: Headers) -> UserContextDto:
        """
        Parse the identity headers of a request.

        Args:
            headers (Headers): The request headers.

        Returns:
            UserContextDto: The caller's user id and roles.

        Raises:
            ValueError: If the user id header is missing or not an integer.
        """
        raw_user_id = headers.get(USER_ID_HEADER)
        if not raw_user_id:
            raise ValueError("Missing authentication credentials")

        try:
            user_id = int(raw_user_id)
        except ValueError:
            raise ValueError(f"Invalid {USER_ID_HEADER} header: {raw_user_id!r}")

        roles, unknown = UserRole.parse_header(headers.get(USER_ROLES_HEADER))
        for name in unknown:
            self.logger.warning("[AuthenticationService] ignoring unknown role %r.", name)
        return UserContextDto(user_id=user_id, roles=roles)
