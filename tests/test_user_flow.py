"""Tests for multi-step user flows."""

import pytest

from page_audit.core.computed import ComputedArtifactCache
from page_audit.core.errors import UsageError
from page_audit.core.types import GatherMode
from page_audit.entrypoints import audit_flow_artifacts, start_flow
from page_audit.user_flow import UserFlow, audit_gather_steps
from tests.helpers import TEST_URL, FakePage, emit_document_load


async def record_three_steps(flow: UserFlow, page: FakePage) -> None:
    await flow.navigate(TEST_URL)
    await flow.start_timespan({"name": "Search for shoes"})
    emit_document_load(page, "https://www.example.com/search?q=shoes")
    await flow.end_timespan()
    await flow.snapshot()


class TestUserFlow:
    """Recording steps on one page."""

    async def test_steps_are_kept_in_call_order(self, page):
        flow = UserFlow(page)

        await record_three_steps(flow, page)

        assert [step.gather_mode for step in flow.gather_steps] == [
            GatherMode.NAVIGATION,
            GatherMode.TIMESPAN,
            GatherMode.SNAPSHOT,
        ]
        assert [step.name for step in flow.gather_steps] == [
            "Navigation report (www.example.com/products)",
            "Search for shoes",
            "Snapshot report (www.example.com/products)",
        ]

    async def test_each_step_resolves_config_for_its_mode(self, page):
        flow = UserFlow(page)

        await record_three_steps(flow, page)

        navigation, timespan, snapshot = flow.gather_steps
        assert navigation.config.gather_mode == GatherMode.NAVIGATION
        assert "DOMStats" not in timespan.config.artifact_ids()
        assert "NetworkLog" not in snapshot.config.artifact_ids()

    async def test_step_flags(self, page):
        flow = UserFlow(page, flags={"locale": "fr-FR"})

        step = await flow.snapshot({"flags": {"only_categories": ["seo"]}})

        assert step.config.settings.locale == "fr-FR"
        assert list(step.config.categories) == ["seo"]
        assert step.flags == {"locale": "fr-FR", "only_categories": ["seo"]}

    async def test_unknown_step_option(self, page):
        with pytest.raises(UsageError, match="Unknown step options: title"):
            await UserFlow(page).snapshot({"title": "x"})

    async def test_end_timespan_without_start(self, page):
        flow = UserFlow(page)

        with pytest.raises(UsageError, match="No timespan in progress"):
            await flow.end_timespan()
        assert flow.gather_steps == ()

    async def test_steps_are_rejected_while_timespan_is_active(self, page):
        flow = UserFlow(page)
        await flow.start_timespan()

        with pytest.raises(UsageError, match="Timespan already in progress"):
            await flow.navigate(TEST_URL)
        with pytest.raises(UsageError, match="Timespan already in progress"):
            await flow.snapshot()
        with pytest.raises(UsageError, match="Timespan already in progress"):
            await flow.start_timespan()
        with pytest.raises(UsageError):
            await flow.get_flow_result()

        await flow.end_timespan()
        assert len(flow.gather_steps) == 1

    async def test_flow_result(self, page):
        flow = UserFlow(page)
        await record_three_steps(flow, page)

        result = await flow.get_flow_result()

        assert result.name == "User flow (www.example.com)"
        assert [step.name for step in result.steps] == [s.name for s in flow.gather_steps]
        assert [step.lhr.gather_mode for step in result.steps] == [
            GatherMode.NAVIGATION,
            GatherMode.TIMESPAN,
            GatherMode.SNAPSHOT,
        ]
        assert "first-contentful-paint" in result.steps[0].lhr.audits
        assert "first-contentful-paint" not in result.steps[1].lhr.audits
        assert set(result.steps[2].lhr.categories) == {"performance", "accessibility", "seo"}

    async def test_named_flow_report(self, page):
        flow = UserFlow(page, name="Checkout")
        await flow.navigate(TEST_URL)

        report = await flow.generate_report()

        assert "<title>Checkout</title>" in report
        with pytest.raises(UsageError):
            await flow.generate_report("csv")

    async def test_empty_flow(self, page):
        with pytest.raises(UsageError):
            UserFlow(page).create_flow_artifacts()
        with pytest.raises(UsageError):
            audit_gather_steps([])


class TestFlowArtifacts:
    """Auditing flow artifacts after the fact."""

    async def test_audit_flow_artifacts_with_new_config(self, page):
        flow = await start_flow(page, name="Browse")
        await record_three_steps(flow, page)
        flow_artifacts = flow.create_flow_artifacts()

        result = await audit_flow_artifacts(
            flow_artifacts, {"extends": "default", "settings": {"skip_audits": ["dom-size"]}}
        )

        assert result.name == "Browse"
        assert len(result.steps) == 3
        assert all("dom-size" not in step.lhr.audits for step in result.steps)
        assert all(step.gather_step is not None for step in result.steps)

    async def test_steps_do_not_share_computed_values(self, page):
        flow = UserFlow(page)
        await flow.navigate(TEST_URL)
        await flow.navigate("https://www.example.com/other")

        result = await flow.get_flow_result()

        first, second = (step.lhr.audits["network-requests"] for step in result.steps)
        assert first.details["items"][0]["url"] == TEST_URL
        assert second.details["items"][0]["url"] == "https://www.example.com/other"

    async def test_flow_audits_with_its_own_cache(self, page):
        flow = UserFlow(page)
        await flow.navigate(TEST_URL)

        await flow.get_flow_result()
        computations = flow._computed_cache.computations

        assert len(flow._computed_cache) > 0
        await flow.get_flow_result()
        assert flow._computed_cache.computations == computations

    async def test_empty_cache_passed_in_is_used(self, page):
        flow = UserFlow(page)
        await flow.navigate(TEST_URL)
        cache = ComputedArtifactCache()

        audit_gather_steps(flow.gather_steps, computed_cache=cache)

        assert len(cache) > 0
