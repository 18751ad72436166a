"""Shared test fixtures."""

from __future__ import annotations

import pytest

from monitor_gateway.auth.models import User
from monitor_gateway.settings import Settings


@pytest.fixture
def user() -> User:
    return User(id="user-1", customer_id="cust-1", email="ops@example.com")


@pytest.fixture
def settings() -> Settings:
    return Settings(env="test", test_check_timeout_seconds=0.2, test_check_deadline_seconds=0.1)
