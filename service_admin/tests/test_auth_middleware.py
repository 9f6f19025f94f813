"""
Unit tests for JWT authentication and role checks.
"""

import httpx
import pytest
from starlette.requests import Request

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.errors import AuthenticationError, AuthorizationError, ConfigurationError
from shared.logging import clear_context, user_id_var
from shared.secrets import SidecarSecretStore
from shared.test_helpers import (
    ADMIN_USER_ID,
    TEST_JWT_SECRET,
    create_mock_jwt_token,
    create_test_config,
)
from service_admin.app.domain import AuthenticatedUser, AuthMiddleware, extract_bearer_token


def make_request(authorization=None) -> Request:
    headers = []
    if authorization is not None:
        headers.append((b"authorization", authorization.encode("latin-1")))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": headers})


@pytest.fixture
def middleware():
    return AuthMiddleware(create_test_config())


@pytest.fixture(autouse=True)
def reset_context():
    yield
    clear_context()


class TestExtractBearerToken:
    """Test cases for Authorization header parsing."""

    def test_valid_header(self):
        assert extract_bearer_token(make_request("Bearer abc.def")) == "abc.def"

    @pytest.mark.parametrize("header,message", [
        (None, "Unauthorized: Missing Authorization header"),
        ("Basic dXNlcjpwYXNz", "Unauthorized: Authorization header must start with Bearer"),
        ("Bearer    ", "Unauthorized: Missing token"),
    ])
    def test_invalid_headers(self, header, message):
        with pytest.raises(AuthenticationError) as exc_info:
            extract_bearer_token(make_request(header))
        assert exc_info.value.message == message


class TestAuthMiddleware:
    """Test cases for AuthMiddleware."""

    def test_env_source_requires_secret(self):
        with pytest.raises(ConfigurationError):
            AuthMiddleware(create_test_config(jwt_secret=None))

    @pytest.mark.asyncio
    async def test_authenticate_valid_token(self, middleware):
        token = create_mock_jwt_token(roles=["admin", "customer"])
        request = make_request(f"Bearer {token}")

        user = await middleware.authenticate_request(request)

        assert user.id == ADMIN_USER_ID
        assert user.email == "admin@example.com"
        assert user.roles == ("admin", "customer")
        assert user.token == token
        assert request.state.user is user
        assert user_id_var.get() == ADMIN_USER_ID

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token_kwargs", [
        {"expires_in": -60},
        {"secret": "some-other-secret"},
        {"audience": "someone-else"},
        {"issuer": "not-auth-service"},
    ])
    async def test_rejected_tokens(self, middleware, token_kwargs):
        token = create_mock_jwt_token(**token_kwargs)

        with pytest.raises(AuthenticationError) as exc_info:
            await middleware.authenticate_request(make_request(f"Bearer {token}"))

        assert exc_info.value.message == "Unauthorized: Invalid or expired token"

    @pytest.mark.asyncio
    async def test_garbage_token_rejected(self, middleware):
        with pytest.raises(AuthenticationError):
            await middleware.verify_token("not-a-jwt")

    def test_authorize_accepts_any_listed_role(self, middleware):
        user = AuthenticatedUser(id="1", email=None, roles=("support",), token="t")
        middleware.authorize(user, "admin", "support")

    def test_authorize_rejects_missing_role(self, middleware):
        user = AuthenticatedUser(id="1", email=None, roles=("customer",), token="t")

        with pytest.raises(AuthorizationError) as exc_info:
            middleware.authorize(user, "admin")

        assert exc_info.value.status_code == 403
        assert "Required roles: admin" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_require_roles_dependency(self, middleware):
        dependency = middleware.require_roles("admin")

        user = await dependency(make_request(f"Bearer {create_mock_jwt_token()}"))
        assert "admin" in user.roles

        with pytest.raises(AuthorizationError):
            await dependency(make_request(f"Bearer {create_mock_jwt_token(roles=['customer'])}"))

    @pytest.mark.asyncio
    async def test_single_role_string_claim(self, middleware):
        dependency = middleware.require_roles("admin")

        user = await dependency(make_request(f"Bearer {create_mock_jwt_token(roles='admin')}"))

        assert user.roles == ("admin",)

    @pytest.mark.asyncio
    async def test_single_role_string_does_not_match_substrings(self, middleware):
        dependency = middleware.require_roles("a")

        with pytest.raises(AuthorizationError):
            await dependency(make_request(f"Bearer {create_mock_jwt_token(roles='admin')}"))

    @pytest.mark.asyncio
    async def test_empty_roles_claim(self, middleware):
        user = await middleware.authenticate_request(make_request(f"Bearer {create_mock_jwt_token(roles=[])}"))
        assert user.roles == ()

    def test_token_hidden_from_repr(self):
        user = AuthenticatedUser(id="1", email="a@b.co", roles=("admin",), token="secret-token")
        assert "secret-token" not in repr(user)


class TestSecretStoreSource:
    """Test cases for JWT secrets read from the sidecar secret store."""

    @pytest.fixture
    def store_requests(self):
        return []

    @pytest.fixture
    def secret_store(self, store_requests):
        def handler(request):
            store_requests.append(request)
            return httpx.Response(200, json={"JWT_SECRET": TEST_JWT_SECRET})

        return SidecarSecretStore("localhost", 3500, "secret-store", transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_secret_fetched_once(self, secret_store, store_requests):
        config = create_test_config(jwt_secret=None, jwt_secret_source="secret-store")
        middleware = AuthMiddleware(config, secret_store=secret_store)

        for _ in range(3):
            await middleware.verify_token(create_mock_jwt_token())

        assert len(store_requests) == 1
        assert str(store_requests[0].url) == "http://localhost:3500/v1.0/secrets/secret-store/JWT_SECRET"

    @pytest.mark.asyncio
    async def test_store_failure_is_configuration_error(self):
        store = SidecarSecretStore(
            "localhost", 3500, transport=httpx.MockTransport(lambda request: httpx.Response(500))
        )
        middleware = AuthMiddleware(
            create_test_config(jwt_secret=None, jwt_secret_source="secret-store"), secret_store=store
        )

        with pytest.raises(ConfigurationError):
            await middleware.verify_token(create_mock_jwt_token())

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self):
        store = SidecarSecretStore(
            "localhost", 3500, transport=httpx.MockTransport(lambda request: httpx.Response(200, json={}))
        )

        with pytest.raises(ConfigurationError):
            await store.get_secret("JWT_SECRET")
