"""Pytest fixtures for API tests."""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from loopy.api.main import app
from loopy.api.services import repo
from loopy.api.tests.helpers import USER_A


@pytest.fixture
def client(db) -> TestClient:
    return TestClient(app)


@pytest.fixture
def verified_domain(db):
    """A verified root domain owned by USER_A."""
    return repo.insert_domain(
        USER_A,
        domain="go.example.com",
        txt_record_value="loopy-verification=0123456789abcdef",
        verified=True,
        verified_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        verification_method="TXT",
    )
