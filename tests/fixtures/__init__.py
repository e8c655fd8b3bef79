"""Test fixtures for advinstkit tests.

Import helpers in your tests using:
    from tests.fixtures.provisioning import RecordingRunner, make_installation
"""

__all__ = [
    "provisioning",
]
