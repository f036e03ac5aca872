"""
JavaScript Renderer - Render pages and capture screenshots using Playwright.

Handles:
- Navigation with a network-quiescent or DOM-parsed completion condition
- Serializing the rendered DOM
- Full-page screenshots when the rendered markup is unusable

Requires: playwright package and browser binaries
Install with: pip install playwright && playwright install chromium

Playwright is imported when a session is opened, not at module import, so
the heavy dependency only loads when a scrape actually runs.
"""

import logging
from pathlib import Path
from typing import Any, Optional

from ..exceptions import CaptureError, NavigationError, NavigationTimeoutError
from ..models import WaitPolicy

logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
)


class JSRenderer:
    """
    One headless browser session.

    Usage:
        async with JSRenderer() as renderer:
            await renderer.navigate(url, WaitPolicy.NETWORK_QUIESCENT, 30000)
            html = await renderer.rendered_html()
    """

    def __init__(
        self,
        headless: bool = True,
        launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS,
        user_agent: str | None = None,
        viewport: dict[str, int] | None = None,
    ):
        """
        Initialize the renderer. No browser is started until ``open()``.

        Args:
            headless: Run Chromium without a window
            launch_args: Extra Chromium command-line flags
            user_agent: Optional User-Agent override for the browser context
            viewport: Page viewport size
        """
        self.headless = headless
        self.launch_args = list(launch_args)
        self.user_agent = user_agent
        self.viewport = viewport or {"width": 1280, "height": 800}

        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None
        self._page: Any = None
        self._navigated = False
        self._timeout_error: type[BaseException] | None = None
        self._playwright_error: type[BaseException] | None = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def __aenter__(self) -> "JSRenderer":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> None:
        """
        Start Playwright, launch Chromium and open a page.

        Raises:
            NavigationError: If Playwright is missing or the browser fails to launch
        """
        if self._page is not None:
            return

        try:
            from playwright.async_api import Error as PlaywrightError
            from playwright.async_api import TimeoutError as PlaywrightTimeout
            from playwright.async_api import async_playwright
        except ImportError as e:
            raise NavigationError(
                "Playwright is not installed. Run: pip install playwright && playwright install chromium"
            ) from e

        self._timeout_error = PlaywrightTimeout
        self._playwright_error = PlaywrightError

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.launch_args,
            )
            context_options: dict[str, Any] = {"viewport": self.viewport}
            if self.user_agent:
                context_options["user_agent"] = self.user_agent
            self._context = await self._browser.new_context(**context_options)
            self._page = await self._context.new_page()
        except Exception as e:
            await self.close()
            raise NavigationError(f"Could not start browser: {e}") from e

        logger.info("Started Playwright browser")

    async def close(self) -> None:
        """Release the page, context, browser and Playwright driver."""
        for name in ("_page", "_context", "_browser"):
            resource = getattr(self, name)
            setattr(self, name, None)
            if resource is None:
                continue
            try:
                await resource.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing {name.strip('_')}: {e}")

        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
            except Exception as e:
                logger.debug(f"Ignoring error while stopping Playwright: {e}")
            logger.info("Stopped Playwright browser")

        self._navigated = False

    async def navigate(self, url: str, wait_policy: WaitPolicy, timeout_ms: int) -> None:
        """
        Navigate to ``url`` and wait for the policy's completion condition.

        Raises:
            NavigationTimeoutError: If the page did not settle within ``timeout_ms``
            NavigationError: If the target is unreachable or returns an error status
        """
        if self._page is None:
            raise NavigationError("Browser session is not open")

        self._navigated = False
        logger.debug(f"Navigating to {url} (wait_until={wait_policy.value}, timeout={timeout_ms}ms)")

        try:
            response = await self._page.goto(
                url,
                wait_until=wait_policy.value,
                timeout=timeout_ms,
            )
        except self._timeout_error as e:
            raise NavigationTimeoutError(f"Timed out after {timeout_ms}ms loading {url}") from e
        except self._playwright_error as e:
            raise NavigationError(f"Could not load {url}: {e}") from e

        if (
            wait_policy is WaitPolicy.NETWORK_QUIESCENT
            and response is not None
            and response.status >= 400
        ):
            raise NavigationError(f"HTTP {response.status} loading {url}")

        self._navigated = True

    async def rendered_html(self) -> str:
        """
        Serialized markup of the current document.

        Raises:
            NavigationError: If no navigation has succeeded in this session
        """
        if self._page is None or not self._navigated:
            raise NavigationError("No rendered document; navigate() must succeed first")
        try:
            return await self._page.content()
        except self._playwright_error as e:
            raise NavigationError(f"Could not serialize document: {e}") from e

    async def screenshot(self, path: str) -> str:
        """
        Capture a full-page PNG to ``path``.

        Raises:
            CaptureError: If the session has no usable page or capture fails
        """
        if self._page is None:
            raise CaptureError("Browser session is not open")

        Path(path).parent.mkdir(parents=True, exist_ok=True)
        try:
            await self._page.screenshot(path=path, full_page=True)
        except self._playwright_error as e:
            raise CaptureError(f"Screenshot capture failed: {e}") from e

        logger.info(f"Screenshot saved to {path}")
        return path


def create_renderer(settings: Optional[Any] = None) -> JSRenderer:
    """Build a renderer from runtime settings."""
    if settings is None:
        return JSRenderer()
    return JSRenderer(
        headless=settings.HEADLESS,
        user_agent=settings.USER_AGENT or None,
    )
