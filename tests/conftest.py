"""Shared pytest fixtures."""

import pytest

from pseudo_hilbert.utils.logging_config import pop_context, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers and context installed by entry points under test."""
    yield
    pop_context()
    setup_logging("WARNING", to_stderr=False, capture_warnings=False)
