"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from models import Enterprise


@pytest.fixture
def declared():
    """Declared attributes for a typical enterprise."""
    return {
        "source_account_id": "acc-1",
        "name": "Acme Corp",
        "primary_contact_iam_id": "IBMid-AB12CD34EF",
        "domain": "acme.com",
    }


@pytest.fixture
def enterprise_json():
    """Enterprise body as returned by the remote API."""
    return {
        "url": "/v1/enterprises/ent-123",
        "id": "ent-123",
        "enterprise_account_id": "acct-ent-123",
        "crn": "crn:v1:bluemix:public:enterprise::a/acct-ent-123::enterprise:ent-123",
        "name": "Acme Corp",
        "domain": "acme.com",
        "state": "active",
        "primary_contact_iam_id": "IBMid-AB12CD34EF",
        "primary_contact_email": "admin@acme.com",
        "created_at": "2024-01-15T10:30:00.123Z",
        "created_by": "IBMid-AB12CD34EF",
        "updated_at": "2024-01-15T10:30:00Z",
        "updated_by": "IBMid-AB12CD34EF",
    }


@pytest.fixture
def enterprise(enterprise_json):
    return Enterprise.model_validate(enterprise_json)


@pytest.fixture
def mock_client(enterprise):
    """Remote-call client stand-in."""
    client = AsyncMock()
    client.create_enterprise = AsyncMock(return_value="ent-123")
    client.get_enterprise = AsyncMock(return_value=enterprise)
    client.update_enterprise = AsyncMock(return_value=None)
    return client


@pytest.fixture
def fixed_time():
    return datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)
