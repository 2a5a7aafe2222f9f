import os
import tempfile

# Settings are read at import time; keep the suite away from real keys and dirs
os.environ.setdefault("GEMINI_API_KEY", "test-key")
os.environ.setdefault("OUTPUT_DIR", tempfile.mkdtemp(prefix="podcaster-test-"))

import pytest

from podcaster.config import Settings
from podcaster.limiter import limiter

CREDENTIAL_VARS = (
    "USE_GOOGLE_TTS",
    "GOOGLE_TTS_CREDENTIALS",
    "GOOGLE_TTS_CREDENTIALS_PATH",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "CLIP_CLEANUP",
)

@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield

@pytest.fixture
def make_settings(monkeypatch, tmp_path):
    """Builds Settings isolated from the developer's environment and .env file."""
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)

    def _make(**overrides) -> Settings:
        values = {"GEMINI_API_KEY": "test-key", "OUTPUT_DIR": str(tmp_path / "output")}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
