"""Shared pytest configuration and fixtures for the screenlapse test suite."""

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a real display"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that grab the real screen",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def capture_time() -> datetime:
    """Fixed cycle timestamp: 2024-03-01 12:34:56."""
    return datetime(2024, 3, 1, 12, 34, 56)


@pytest.fixture
def output_dir(tmp_path) -> Path:
    return tmp_path / "captures"


@pytest.fixture
def tool_runner():
    """Runner that records external tool invocations instead of spawning them."""
    from tests.infrastructure.mocks.display_mocks import RecordingToolRunner
    return RecordingToolRunner()


@pytest.fixture
def no_sleep():
    """Sleep replacement that records requested delays and returns at once."""
    delays = []

    async def _sleep(seconds):
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
