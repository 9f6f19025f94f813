"""
Shared fixtures for Admin Service tests.
"""

import pytest
from unittest.mock import AsyncMock

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from fastapi.testclient import TestClient

from shared.test_helpers import FakeDownstream, create_mock_jwt_token, create_test_config
from service_admin.app.main import AdminService
from service_admin.app.messaging import MessagingContext, MessagingProvider


@pytest.fixture
def config():
    """Test configuration (direct mode, dapr messaging)."""
    return create_test_config()


@pytest.fixture
def downstream():
    """Fake downstream services."""
    return FakeDownstream()


@pytest.fixture
def provider():
    """Messaging provider double that confirms every publish."""
    mock = AsyncMock(spec=MessagingProvider)
    mock.publish_event.return_value = True
    return mock


@pytest.fixture
def messaging(config, provider):
    return MessagingContext(config, provider=provider)


@pytest.fixture
def admin_service(config, messaging, downstream):
    return AdminService(config, messaging=messaging, http_transport=downstream.transport)


@pytest.fixture
def client(admin_service):
    return TestClient(admin_service.app)


@pytest.fixture
def admin_token():
    return create_mock_jwt_token()


@pytest.fixture
def auth_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
