"""
Fake implementations for testing.

This package contains fake (test double) implementations of core interfaces,
following the "fakes over mocks" philosophy. Fakes are simplified working
implementations that behave like real components but avoid network calls.

Key fakes:
- ScriptedProvider: Chat provider replaying scripted replies and errors
- FailingProvider: Chat provider that always raises
- RecordingSleep: Records backoff and pacing delays instead of sleeping
- FakeClock: Manually advanced clock for cache expiry
"""

from tests.fakes.clock import FakeClock
from tests.fakes.providers import FailingProvider, RecordingSleep, ScriptedProvider

__all__ = [
    "FakeClock",
    "FailingProvider",
    "RecordingSleep",
    "ScriptedProvider",
]
