"""Tests for CLI interface."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from page_audit.cli.main import build_flags, main_async, parse_args
from tests.helpers import TEST_URL, FakePage


class FakeSession:
    """Replaces PlaywrightPageSession with an in-memory page."""

    instances: list["FakeSession"] = []
    page_options: dict = {}

    def __init__(self, settings, headless=True):
        self.settings = settings
        self.headless = headless
        self.page = FakePage(**self.page_options)
        FakeSession.instances.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


@pytest.fixture
def fake_session():
    FakeSession.instances = []
    FakeSession.page_options = {}
    with patch("page_audit.cli.main.PlaywrightPageSession", FakeSession):
        yield FakeSession


@pytest.mark.unit
def test_parse_args_defaults():
    """Test default argument values."""
    args = parse_args([TEST_URL])

    assert args.url == TEST_URL
    assert args.config_path is None
    assert args.preset is None
    assert args.output is None
    assert args.no_headless is False
    assert args.log_level == "INFO"


@pytest.mark.unit
def test_parse_args_rejects_config_path_with_preset(tmp_path):
    with pytest.raises(SystemExit):
        parse_args([TEST_URL, "--config-path", str(tmp_path / "c.yaml"), "--preset", "desktop"])


@pytest.mark.unit
def test_build_flags():
    args = parse_args(
        [TEST_URL, "--output", "html", "--only-categories", "seo", "performance", "--max-wait-for-load", "9000"]
    )

    assert build_flags(args) == {
        "output": "html",
        "only_categories": ("seo", "performance"),
        "max_wait_for_load": 9000,
    }
    assert build_flags(parse_args([TEST_URL])) == {}


@pytest.mark.unit
def test_build_flags_keeps_zero_max_wait():
    args = parse_args([TEST_URL, "--max-wait-for-load", "0"])

    assert build_flags(args) == {"max_wait_for_load": 0}


@pytest.mark.unit
async def test_main_zero_max_wait_is_a_config_error(fake_session):
    exit_code = await main_async([TEST_URL, "--max-wait-for-load", "0"])

    assert exit_code == 1
    assert fake_session.instances == []


@pytest.mark.unit
async def test_main_writes_report(tmp_path, fake_session):
    """Test a full run against a fake page."""
    output_path = tmp_path / "reports" / "report.json"

    exit_code = await main_async([TEST_URL, "--preset", "desktop", "--output-path", str(output_path)])

    assert exit_code == 0
    content = json.loads(output_path.read_text())
    assert content["final_url"] == TEST_URL
    assert content["config_settings"]["form_factor"] == "desktop"
    session = fake_session.instances[0]
    assert session.settings.form_factor == "desktop"
    assert session.headless is True


@pytest.mark.unit
async def test_main_prints_report(capsys, fake_session):
    exit_code = await main_async([TEST_URL, "--output", "csv", "--no-headless"])

    assert exit_code == 0
    assert capsys.readouterr().out.startswith("requested_url,final_url")
    assert fake_session.instances[0].headless is False


@pytest.mark.unit
async def test_main_runtime_error_exit_code(tmp_path, fake_session):
    fake_session.page_options = {"status": 500}

    exit_code = await main_async([TEST_URL, "--output-path", str(tmp_path / "r.json")])

    assert exit_code == 1
    content = json.loads((tmp_path / "r.json").read_text())
    assert content["runtime_error"]["code"] == "ERRORED_DOCUMENT_REQUEST"


@pytest.mark.unit
async def test_main_invalid_config(fake_session):
    exit_code = await main_async([TEST_URL, "--max-wait-for-load", "-5"])

    assert exit_code == 1
    assert fake_session.instances == []


@pytest.mark.unit
async def test_main_interrupted(fake_session):
    with patch("page_audit.cli.main.navigation", AsyncMock(side_effect=KeyboardInterrupt)):
        exit_code = await main_async([TEST_URL])

    assert exit_code == 130
