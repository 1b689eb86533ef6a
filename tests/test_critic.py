"""Tests for the test run driver."""

import asyncio
import io
import logging
from unittest.mock import AsyncMock, Mock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from csscritic.critic import CssCritic
from csscritic.errors import RenderError
from csscritic.models.comparison import RenderResult, SuiteReport, TestCase
from csscritic.renderer.page_renderer import PageRenderer


class RecordingReporter:
    """Records the order of every notification it receives."""

    def __init__(self):
        self.events = []

    def report_comparison_starting(self, starting):
        self.events.append(("starting", starting.test_case.url))

    async def report_comparison(self, comparison):
        await asyncio.sleep(0)
        self.events.append(("comparison", comparison.test_case.url, comparison.status))

    def report(self, suite: SuiteReport):
        self.events.append(("report", suite.success))


def _store(reference=None) -> Mock:
    store = Mock(spec=["read_reference_image", "store_reference_image"])
    store.read_reference_image = AsyncMock(return_value=reference)
    store.store_reference_image = AsyncMock()
    return store


def _renderer(image) -> Mock:
    renderer = Mock(spec=["render"])
    renderer.render = AsyncMock(return_value=RenderResult(image=image, errors=[]))
    return renderer


class TestAdd:

    def test_accepts_url_strings(self, renderer, image_store):
        critic = CssCritic(renderer, image_store)

        test_case = critic.add("page.html")

        assert test_case == TestCase(url="page.html")
        assert critic.test_cases == [test_case]

    def test_accepts_dicts_with_extra_params(self, renderer, image_store):
        critic = CssCritic(renderer, image_store)

        test_case = critic.add({"url": "page.html", "hover": ".menu"})

        assert test_case.params == {"hover": ".menu"}

    def test_accepts_test_cases(self, renderer, image_store):
        critic = CssCritic(renderer, image_store)
        test_case = TestCase(url="page.html")

        assert critic.add(test_case) is test_case

    def test_warns_about_reporter_without_methods(self, renderer, image_store, caplog):
        with caplog.at_level(logging.WARNING):
            CssCritic(renderer, image_store, reporters=[object()])

        assert "implements no reporting method" in caplog.text

    def test_accepts_partial_reporter_silently(self, renderer, image_store, caplog):
        reporter = Mock(spec=["report"])
        with caplog.at_level(logging.WARNING):
            critic = CssCritic(renderer, image_store, reporters=[reporter])

        assert critic.reporters == [reporter]
        assert caplog.text == ""


class TestExecute:

    @pytest.mark.asyncio
    async def test_succeeds_when_all_comparisons_pass(self, white_image):
        reporter = RecordingReporter()
        critic = CssCritic(_renderer(white_image), _store(white_image.copy()), reporters=[reporter])
        critic.add("one.html")
        critic.add("two.html")

        assert await critic.execute() is True

        assert reporter.events[:2] == [("starting", "one.html"), ("starting", "two.html")]
        assert sorted(reporter.events[2:4]) == [
            ("comparison", "one.html", "passed"),
            ("comparison", "two.html", "passed"),
        ]
        assert reporter.events[-1] == ("report", True)

    @pytest.mark.asyncio
    async def test_fails_on_missing_reference(self, white_image):
        reporter = RecordingReporter()
        critic = CssCritic(_renderer(white_image), _store(None), reporters=[reporter])
        critic.add("one.html")

        assert await critic.execute() is False
        assert ("comparison", "one.html", "reference_missing") in reporter.events
        assert reporter.events[-1] == ("report", False)

    @pytest.mark.asyncio
    async def test_fails_on_render_error(self, white_image):
        renderer = Mock(spec=["render"])
        renderer.render = AsyncMock(side_effect=RenderError("one.html"))
        reporter = RecordingReporter()
        critic = CssCritic(renderer, _store(white_image), reporters=[reporter])
        critic.add("one.html")

        assert await critic.execute() is False
        assert ("comparison", "one.html", "error") in reporter.events

    @pytest.mark.asyncio
    async def test_empty_run_succeeds(self, renderer, image_store):
        reporter = RecordingReporter()
        critic = CssCritic(renderer, image_store, reporters=[reporter])

        assert await critic.execute() is True
        assert reporter.events == [("report", True)]

    @pytest.mark.asyncio
    async def test_reporter_failure_aborts_the_run(self, white_image):
        reporter = Mock(spec=["report_comparison"])
        reporter.report_comparison = AsyncMock(side_effect=IOError("cannot write report"))
        critic = CssCritic(_renderer(white_image), _store(white_image), reporters=[reporter])
        critic.add("one.html")

        with pytest.raises(IOError):
            await critic.execute()

    @pytest.mark.asyncio
    async def test_accepting_from_a_reporter_stores_the_page(self, white_image):
        store = _store(None)

        class Accepting:
            async def report_comparison(self, comparison):
                await comparison.accept_page()

        critic = CssCritic(_renderer(white_image), store, reporters=[Accepting()])
        critic.add({"url": "one.html", "hover": ".menu"})

        await critic.execute()

        stored_case, stored_image, size = store.store_reference_image.await_args.args
        assert stored_case.params == {"hover": ".menu"}
        assert stored_image is white_image
        assert (size.width, size.height) == (800, 100)

    @pytest.mark.asyncio
    async def test_unhoverable_page_is_an_error_not_an_aborted_run(self, white_image):
        buf = io.BytesIO()
        white_image.save(buf, format="PNG")
        page = AsyncMock()
        page.on = Mock()
        page.goto = AsyncMock(return_value=None)
        page.hover = AsyncMock(side_effect=PlaywrightTimeoutError("waiting for selector .missing"))
        page.screenshot = AsyncMock(return_value=buf.getvalue())
        context = AsyncMock()
        context.new_page = AsyncMock(return_value=page)
        renderer = PageRenderer(timeout_ms=1000)
        renderer._browser = AsyncMock()
        renderer._browser.new_context = AsyncMock(return_value=context)

        reporter = RecordingReporter()
        critic = CssCritic(renderer, _store(white_image.copy()), reporters=[reporter])
        critic.add("good.html")
        critic.add({"url": "hover.html", "hover": ".missing"})

        assert await critic.execute() is False

        assert ("comparison", "good.html", "passed") in reporter.events
        assert ("comparison", "hover.html", "error") in reporter.events
        assert reporter.events[-1] == ("report", False)
