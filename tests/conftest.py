"""Shared fixtures."""

import pytest

from fakes import FakeTransport


@pytest.fixture
def transport():
    """Fake transport logged in as @bot:example.org with no rooms joined."""
    return FakeTransport()
