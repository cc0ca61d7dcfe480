"""Playwright-backed page session for running audits."""

import logging
from typing import Any

from playwright.async_api import Browser, BrowserContext, Page, async_playwright

from ..core.types import ConfigSettings

logger = logging.getLogger(__name__)

CHROMIUM_ARGS = [
    "--no-first-run",
    "--no-default-browser-check",
    "--disable-dev-shm-usage",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--mute-audio",
]


class PlaywrightPageSession:
    """Launches Chromium and opens a page emulated per the run settings.

    The page is what gets handed to the gather entry points. Use it as an
    async context manager:

        async with PlaywrightPageSession(settings) as session:
            result = await navigation(session.page, url)
    """

    def __init__(self, settings: ConfigSettings | None = None, headless: bool = True):
        """Initialize the session.

        Args:
            settings: Run settings used for viewport, user agent, locale and throttling
            headless: Run browser in headless mode
        """
        self.settings = settings or ConfigSettings()
        self.headless = headless
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    async def __aenter__(self) -> "PlaywrightPageSession":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    @property
    def page(self) -> Page:
        if not self._page:
            raise RuntimeError("Browser not connected")
        return self._page

    def _context_options(self) -> dict[str, Any]:
        settings = self.settings
        options: dict[str, Any] = {"locale": settings.locale}
        emulation = settings.screen_emulation
        if not emulation.disabled:
            options.update(
                viewport={"width": emulation.width, "height": emulation.height},
                device_scale_factor=emulation.device_scale_factor,
                is_mobile=emulation.mobile,
                has_touch=emulation.mobile,
            )
        if settings.emulated_user_agent:
            options["user_agent"] = settings.emulated_user_agent
        return options

    async def connect(self) -> None:
        """Launch browser and create page."""
        logger.info("Launching Playwright browser...")

        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless, args=CHROMIUM_ARGS
        )
        self._context = await self._browser.new_context(**self._context_options())
        self._page = await self._context.new_page()

        # Navigation timeouts are enforced by the gather itself
        self._page.set_default_navigation_timeout(0)

        if self.settings.throttling_method == "devtools":
            await self._apply_throttling()

        logger.info(
            f"Playwright browser launched ({self.settings.form_factor}, "
            f"throttling={self.settings.throttling_method})"
        )

    async def _apply_throttling(self) -> None:
        """Apply network and CPU throttling over a CDP session."""
        if self._context is None or self._page is None:
            raise RuntimeError("Browser not connected")
        throttling = self.settings.throttling
        cdp = await self._context.new_cdp_session(self._page)
        throughput = throttling.throughput_kbps * 1024 / 8
        await cdp.send("Network.enable")
        await cdp.send(
            "Network.emulateNetworkConditions",
            {
                "offline": False,
                "latency": throttling.rtt_ms,
                "downloadThroughput": throughput,
                "uploadThroughput": throughput,
            },
        )
        await cdp.send(
            "Emulation.setCPUThrottlingRate", {"rate": throttling.cpu_slowdown_multiplier}
        )
        logger.debug(
            f"Throttling applied: rtt={throttling.rtt_ms}ms, "
            f"throughput={throttling.throughput_kbps}kbps, "
            f"cpu={throttling.cpu_slowdown_multiplier}x"
        )

    async def disconnect(self) -> None:
        """Close browser and cleanup.

        Each resource is closed independently so a failure in one
        does not prevent cleanup of the others.
        """
        if self._page:
            try:
                await self._page.close()
            except Exception as e:
                logger.warning(f"Failed to close page: {e}")
            finally:
                self._page = None

        if self._context:
            try:
                await self._context.close()
            except Exception as e:
                logger.warning(f"Failed to close context: {e}")
            finally:
                self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as e:
                logger.warning(f"Failed to close browser: {e}")
            finally:
                self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.warning(f"Failed to stop playwright: {e}")
            finally:
                self._playwright = None

        logger.info("Playwright browser closed")
