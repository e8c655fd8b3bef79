"""
Pytest configuration and shared fixtures for advinstkit tests.
"""

# Import test fixtures to make them available to all tests
# ruff: noqa: F401
from tests.fixtures.provisioning import (
    config,
    tool_cache,
    runner,
    sink,
    no_custom_url,
)
