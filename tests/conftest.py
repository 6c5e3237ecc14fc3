"""Root test configuration: runtime artifact cleanup and logging reset"""

from pathlib import Path

import pytest
import structlog


_PROJECT_ROOT = Path(__file__).parent.parent

_CLEANUP_FILES = ["mdcms.db", "test.db"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove DB files created during the test session."""
    yield
    for name in _CLEANUP_FILES:
        p = _PROJECT_ROOT / name
        if p.exists():
            p.unlink()


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any structlog configuration a test (or CLI invocation) applied."""
    yield
    structlog.reset_defaults()
