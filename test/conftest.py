import pytest

from bundler_resilience.core.context import ResilienceContext
from bundler_resilience.adapters.mock import MockTransport


@pytest.fixture
def context():
    """A fresh, unresolved context per test."""
    MockTransport.instances = 0
    return ResilienceContext()
