"""Pytest configuration and fixtures."""

import pytest

import config
from plugins.base import UserModel
from plugins.clients.models import User
from plugins.registry import reset_registry

from fakes import CREATED_AT, FakePanelClient


@pytest.fixture
def fake_client():
    return FakePanelClient()


@pytest.fixture
def desired_user():
    """Declared attributes of a user that does not exist yet."""
    return UserModel(
        username="alice",
        email="a@x.com",
        first_name="A",
        last_name="L",
    )


@pytest.fixture
def panel_user():
    """A user as the panel reports it."""
    return User(
        id=42,
        username="alice",
        email="a@x.com",
        first_name="A",
        last_name="L",
        created_at=CREATED_AT,
        updated_at=CREATED_AT,
    )


@pytest.fixture(autouse=True)
def clean_globals():
    """Reset the config and registry singletons around each test."""
    config.reset_config()
    reset_registry()
    yield
    config.reset_config()
    reset_registry()
