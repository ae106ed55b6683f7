"""Pytest configuration for hopdriver tests."""

import sys
from pathlib import Path

import pytest
import structlog
from structlog._config import BoundLoggerLazyProxy

# Add src directory to sys.path for test imports
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate each test from the caller's environment and .env files.

    This fixture:
    - Removes every HOPDRIVER_* environment variable
    - Runs the test from an empty temporary directory (no .env pickup)
    - Resets the global settings instance before each test
    """
    import os

    for key in list(os.environ):
        if key.startswith("HOPDRIVER_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)

    from hopdriver.config import reset_settings

    reset_settings()
    return tmp_path


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Reset structlog after each test to prevent closed file handle errors.

    CliRunner captures stderr with a temporary file. When configure_logging()
    runs inside CliRunner, structlog binds loggers to that temp file. After
    the test, CliRunner closes the file, so stale references are dropped here.
    """
    yield
    structlog.reset_defaults()
    for module in list(sys.modules.values()):
        for attr in getattr(module, "__dict__", {}).values():
            if isinstance(attr, BoundLoggerLazyProxy):
                attr.__dict__.pop("bind", None)
