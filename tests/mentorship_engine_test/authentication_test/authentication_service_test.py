import unittest
from unittest.mock import MagicMock

from starlette.datastructures import Headers

from mentorship_engine.authentication.authentication_service import (
    AuthenticationService,
)
from mentorship_engine.common.user_role import UserRole


class TestAuthenticationService(unittest.TestCase):
    def setUp(self):
        self.logger = MagicMock()
        self.service = AuthenticationService(logger=self.logger)

    def test_parses_user_id_and_roles(self):
        """Test the id and every known role are read from the headers."""
        user = self.service.authenticate_request(
            Headers({"X-User-Id": "42", "X-User-Roles": "admin, mentorship"})
        )

        self.assertEqual(user.user_id, 42)
        self.assertEqual(user.roles, [UserRole.ADMIN, UserRole.MENTORSHIP])
        self.assertTrue(user.has_role(UserRole.ADMIN))
        self.assertFalse(user.has_role(UserRole.CRON_RUNNER))

    def test_missing_roles_header_gives_no_roles(self):
        user = self.service.authenticate_request(Headers({"X-User-Id": "7"}))

        self.assertEqual(user.roles, [])

    def test_unknown_role_is_ignored_with_warning(self):
        user = self.service.authenticate_request(
            Headers({"X-User-Id": "7", "X-User-Roles": "superuser,,cronRunner"})
        )

        self.assertEqual(user.roles, [UserRole.CRON_RUNNER])
        self.logger.warning.assert_called_once()

    def test_missing_user_id_raises(self):
        with self.assertRaises(ValueError) as ctx:
            self.service.authenticate_request(Headers({"X-User-Roles": "admin"}))

        self.assertEqual(str(ctx.exception), "Missing authentication credentials")

    def test_non_integer_user_id_raises(self):
        with self.assertRaises(ValueError) as ctx:
            self.service.authenticate_request(Headers({"X-User-Id": "alice"}))

        self.assertIn("X-User-Id", str(ctx.exception))


class TestUserRoleParsing(unittest.TestCase):
    def test_parse_header(self):
        roles, unknown = UserRole.parse_header(" admin ,guest,cronRunner")

        self.assertEqual(roles, [UserRole.ADMIN, UserRole.CRON_RUNNER])
        self.assertEqual(unknown, ["guest"])

    def test_parse_empty_header(self):
        self.assertEqual(UserRole.parse_header(None), ([], []))


if __name__ == "__main__":
    unittest.main()
