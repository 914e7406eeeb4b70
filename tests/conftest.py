from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the repository root importable so tests can use ``tests.fakes``
_ROOT = Path(__file__).resolve().parents[1]
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

_SETTINGS_ENV_VARS = [
    "YANDEX_GPT_API_KEY", "YANDEX_API_KEY", "YANDEX_FOLDER_ID", "YANDEX_MODEL",
    "OPENROUTER_API_KEY", "OPENROUTER_MODEL", "APP_URL", "NEXT_PUBLIC_APP_URL",
    "DEFAULT_BACKEND", "BACKEND_ORDER", "GENERATION_TEMPERATURE",
    "GENERATION_MAX_TOKENS", "GENERATION_RETRIES", "RETRY_BASE_DELAY",
    "REQUEST_TIMEOUT", "CHUNK_MAX_LENGTH", "CHUNK_PACING_DELAY",
    "CACHE_TTL_SECONDS", "CACHE_SWEEP_INTERVAL", "LOG_LEVEL", "LOG_FORMAT",
    "SERVICE_NAME", "ENVIRONMENT", "ENV",
]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> pytest.MonkeyPatch:
    """
    Isolate settings from the host environment.

    Changes to a temp directory so no ``.env`` file is read and removes every
    variable the settings classes look at. Returns the monkeypatch so tests
    can set their own values.
    """
    monkeypatch.chdir(tmp_path)
    for var in _SETTINGS_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def recording_sleep():
    """Provide a RecordingSleep that replaces asyncio.sleep."""
    from tests.fakes import RecordingSleep

    return RecordingSleep()


@pytest.fixture
def fake_clock():
    """Provide a manually advanced clock."""
    from tests.fakes import FakeClock

    return FakeClock()
