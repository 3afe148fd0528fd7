"""Shared fixtures for the test suite."""

from __future__ import annotations

import pytest

from tactics_sim.sim.content.registry import ContentRegistry


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    """Module-scoped registry with the bundled content loaded once."""
    return ContentRegistry.default()
