"""Pytest configuration and shared fixtures."""

import pytest

from core.config import BridgeSettings
from tests.fakes import CALLER_ID


@pytest.fixture
def settings() -> BridgeSettings:
    """Bridge settings with no delay between polls."""
    return BridgeSettings(
        direct_line_secret="test-secret",
        direct_line_url="https://directline.test/v3/directline",
        caller_id=CALLER_ID,
        poll_interval_ms=0,
        max_poll_attempts=5,
    )
