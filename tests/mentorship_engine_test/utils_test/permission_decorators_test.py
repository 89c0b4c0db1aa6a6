import inspect
import unittest
from unittest.mock import MagicMock, patch
from http import HTTPStatus

from starlette.requests import Request

from mentorship_engine.common.user_role import UserRole
from mentorship_engine.dto.user_context_dto import UserContextDto
from mentorship_engine.utils.permission_decorators import authenticate


class TestAuthenticateDecorator(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        patcher = patch("mentorship_engine.utils.permission_decorators.api_error")
        self.mock_api_error = patcher.start()
        self.addCleanup(patcher.stop)

        def fake_api_error(*args, **kwargs):
            resp = MagicMock()
            resp.status_code = kwargs.get("status_code")
            return resp

        self.mock_api_error.side_effect = fake_api_error
        self.mock_request = MagicMock(spec=Request)
        self.mock_request.state = MagicMock()

        self.user = UserContextDto(user_id=42, roles=[UserRole.MENTORSHIP])

    async def test_no_user_in_state_returns_401(self):
        """Test 401 when the middleware attached no user."""
        self.mock_request.state.user = None

        @authenticate()
        async def dummy_func():
            return "success"

        response = await dummy_func(request=self.mock_request)
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    async def test_insufficient_permissions_returns_403(self):
        """Test 403 when the user holds none of the required roles."""
        self.mock_request.state.user = self.user

        @authenticate(roles=[UserRole.ADMIN])
        async def dummy_func():
            return "success"

        response = await dummy_func(request=self.mock_request)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    async def test_any_listed_role_is_enough(self):
        self.mock_request.state.user = self.user

        @authenticate(roles=[UserRole.ADMIN, UserRole.MENTORSHIP])
        async def dummy_func():
            return "called"

        self.assertEqual(await dummy_func(request=self.mock_request), "called")

    async def test_inject_current_user_and_user_id(self):
        """Test current_user and user_id are injected by name."""
        self.mock_request.state.user = self.user

        @authenticate()
        async def dummy_func(current_user, user_id):
            return current_user, user_id

        current_user, user_id = await dummy_func(request=self.mock_request)
        self.assertIs(current_user, self.user)
        self.assertEqual(user_id, 42)

    async def test_business_arguments_are_forwarded(self):
        """Test path and body parameters reach the endpoint untouched."""
        self.mock_request.state.user = self.user

        @authenticate()
        async def dummy_func(cycle_id: int, request):
            return cycle_id, request

        cycle_id, request = await dummy_func(request=self.mock_request, cycle_id=3)
        self.assertEqual(cycle_id, 3)
        self.assertIs(request, self.mock_request)

    def test_signature_hides_injected_parameters(self):
        """Test the exposed signature has request first and no injected names."""

        @authenticate()
        async def dummy_func(cycle_id: int, current_user, user_id):
            return cycle_id

        params = list(inspect.signature(dummy_func).parameters)
        self.assertEqual(params, ["request", "cycle_id"])


if __name__ == "__main__":
    unittest.main()
