"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from tests.helpers import TEST_URL, FakePage, RecordingGatherer, make_artifacts


@pytest.fixture(scope="session")
def project_root():
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture(scope="session")
def configs_dir(project_root):
    """Get packaged configs directory."""
    return project_root / "src" / "page_audit" / "configs"


@pytest.fixture
def page():
    """A fake page that loads TEST_URL successfully."""
    return FakePage()


@pytest.fixture
def url():
    return TEST_URL


@pytest.fixture
def artifacts():
    """Artifacts from a healthy navigation."""
    return make_artifacts()


@pytest.fixture
def recording_log():
    """Lifecycle log shared by the recording test gatherers."""
    RecordingGatherer.log.clear()
    yield RecordingGatherer.log
    RecordingGatherer.log.clear()


@pytest.fixture
def recording_config():
    """Config with two recording gatherers and no audits."""
    return {
        "artifacts": [
            {"id": "First", "gatherer": "tests.helpers:FirstRecorder"},
            {"id": "Second", "gatherer": "tests.helpers:SecondRecorder"},
        ],
    }
