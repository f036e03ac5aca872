"""
Retrieval Orchestrator - Escalate through retrieval strategies for one URL.

Fetching strategy:
1. Direct: render the live page, waiting for network quiescence
2. Archived: look up the latest Wayback snapshot and render it
3. Screenshot: best-effort load of the live page, full-page capture, and a
   placeholder document pointing at the image

Each attempt is a transition function that returns either a terminal
RetrievalOutcome or an Advance to the next state. Strategies run strictly
in order, each at most once, and the browser session is shared by all of
them and released on every exit path.

Usage:
    orchestrator = RetrievalOrchestrator()
    outcome = await orchestrator.retrieve(RetrievalRequest(url, "scrape.html"))
"""

import html
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath
from typing import Any, Awaitable, Callable, Optional, Union

from .advanced.archive import ArchiveLookup
from .advanced.js_renderer import JSRenderer, create_renderer
from .config import Settings, get_settings
from .exceptions import ArchiveLookupError, CaptureError, NavigationError, RetrievalError
from .extractors import PLACEHOLDER_META_NAME, extract
from .models import RetrievalMethod, RetrievalOutcome, RetrievalRequest, WaitPolicy
from .storage import write_output

logger = logging.getLogger(__name__)

PLACEHOLDER_NOTICE = (
    "The page could not be rendered directly or retrieved from an archive. "
    "A full-page screenshot was captured instead."
)


class RetrievalState(Enum):
    IDLE = "idle"
    DIRECT_ATTEMPT = "direct_attempt"
    ARCHIVED_ATTEMPT = "archived_attempt"
    SCREENSHOT_ATTEMPT = "screenshot_attempt"
    DONE = "done"
    FAILED = "failed"


# Allowed forward order; a run never moves back through it
STATE_ORDER = [
    RetrievalState.IDLE,
    RetrievalState.DIRECT_ATTEMPT,
    RetrievalState.ARCHIVED_ATTEMPT,
    RetrievalState.SCREENSHOT_ATTEMPT,
    RetrievalState.DONE,
    RetrievalState.FAILED,
]


@dataclass(frozen=True)
class Advance:
    """Transition result: move on to ``next_state`` because of ``reason``."""
    next_state: RetrievalState
    reason: str
    cause: BaseException | None = None


Step = Union[RetrievalOutcome, Advance]


@dataclass
class _Run:
    """Per-run state: the request, the lazily opened browser, and skip causes."""
    request: RetrievalRequest
    renderer_factory: Callable[[], Any]
    renderer: Any = None
    opened: bool = False
    causes: list[str] = field(default_factory=list)
    last_cause: BaseException | None = None
    launch_error: NavigationError | None = None

    async def browser(self) -> Any:
        """
        Create and open the browser session on first use.

        A launch failure is remembered and re-raised, so the browser is
        started at most once per run.
        """
        if self.launch_error is not None:
            raise self.launch_error
        if self.renderer is None:
            self.renderer = self.renderer_factory()
        if not self.opened:
            try:
                await self.renderer.open()
            except NavigationError as e:
                self.launch_error = e
                raise
            self.opened = True
        return self.renderer

    async def release(self) -> None:
        if self.renderer is not None:
            await self.renderer.close()


def build_placeholder(original_url: str, screenshot_path: str) -> str:
    """
    Minimal document standing in for content that could not be rendered.

    The unescaped URL is also kept in a leading comment so the file holds
    it verbatim; a ``>`` in it is percent-encoded to keep the comment closed.
    """
    url = html.escape(original_url)
    raw_url = original_url.replace(">", "%3E")
    shot = html.escape(screenshot_path)
    image_src = html.escape(PurePath(screenshot_path).name)
    return (
        "<!DOCTYPE html>\n"
        f"<!-- original-url: {raw_url} -->\n"
        "<html>\n"
        "<head>\n"
        '<meta charset="utf-8">\n'
        f'<meta name="{PLACEHOLDER_META_NAME}" content="screenshot">\n'
        f"<title>Screenshot of {url}</title>\n"
        "</head>\n"
        "<body>\n"
        f"<p>{html.escape(PLACEHOLDER_NOTICE)}</p>\n"
        f'<p>Original URL: <a href="{url}">{url}</a></p>\n'
        f"<p>Screenshot: {shot}</p>\n"
        f'<img src="{image_src}" alt="Screenshot of {url}">\n'
        "</body>\n"
        "</html>\n"
    )


class RetrievalOrchestrator:
    """
    Runs the direct → archived → screenshot fallback chain for one request.
    """

    def __init__(
        self,
        renderer_factory: Optional[Callable[[], JSRenderer]] = None,
        archive: Optional[ArchiveLookup] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            renderer_factory: Builds the browser session; called at most once per run
            archive: Archive lookup client
            settings: Timeouts and browser options
        """
        self.settings = settings or get_settings()
        self._renderer_factory = renderer_factory or (lambda: create_renderer(self.settings))
        self.archive = archive or ArchiveLookup(
            timeout=self.settings.LOOKUP_TIMEOUT,
            user_agent=self.settings.USER_AGENT or None,
        )
        self._transitions: dict[RetrievalState, Callable[[_Run], Awaitable[Step]]] = {
            RetrievalState.IDLE: self._start,
            RetrievalState.DIRECT_ATTEMPT: self._attempt_direct,
            RetrievalState.ARCHIVED_ATTEMPT: self._attempt_archived,
            RetrievalState.SCREENSHOT_ATTEMPT: self._attempt_screenshot,
        }

    async def retrieve(self, request: RetrievalRequest) -> RetrievalOutcome:
        """
        Retrieve ``request.target_url`` and write the artifact to ``request.output_path``.

        Returns:
            RetrievalOutcome describing the strategy that succeeded

        Raises:
            RetrievalError: If every strategy failed; ``cause`` is the last underlying error
        """
        logger.info(f"Scraping: {request.target_url}")
        run = _Run(request=request, renderer_factory=self._renderer_factory)
        state = RetrievalState.IDLE

        try:
            while True:
                step = await self._transitions[state](run)
                if isinstance(step, RetrievalOutcome):
                    outcome = step
                    break

                if STATE_ORDER.index(step.next_state) <= STATE_ORDER.index(state):
                    raise RuntimeError(f"Invalid transition {state.value} -> {step.next_state.value}")

                if step.cause is not None:
                    run.last_cause = step.cause
                if state is not RetrievalState.IDLE:
                    run.causes.append(f"{state.value}: {step.reason}")

                if step.next_state is RetrievalState.FAILED:
                    logger.error(f"All retrieval strategies failed for {request.target_url}: {step.reason}")
                    raise RetrievalError(
                        f"All retrieval strategies failed for {request.target_url}",
                        cause=run.last_cause,
                    ) from run.last_cause

                state = step.next_state
        finally:
            await run.release()

        outcome.causes = list(run.causes)
        write_output(request.output_path, outcome.html)
        logger.info(f"Retrieved {request.target_url} via {outcome.method.value} from {outcome.source_url}")
        return outcome

    async def _start(self, run: _Run) -> Step:
        return Advance(RetrievalState.DIRECT_ATTEMPT, "start")

    async def _render(self, run: _Run, url: str, timeout_ms: int) -> str:
        renderer = await run.browser()
        await renderer.navigate(url, WaitPolicy.NETWORK_QUIESCENT, timeout_ms)
        return await renderer.rendered_html()

    async def _attempt_direct(self, run: _Run) -> Step:
        url = run.request.target_url
        try:
            content = await self._render(run, url, self.settings.DIRECT_TIMEOUT_MS)
        except NavigationError as e:
            logger.warning(f"Direct access failed for {url}: {e}")
            return Advance(RetrievalState.ARCHIVED_ATTEMPT, f"navigation failed: {e}", e)

        return RetrievalOutcome(
            method=RetrievalMethod.DIRECT,
            source_url=url,
            html=content,
            summary=extract(content),
        )

    async def _attempt_archived(self, run: _Run) -> Step:
        url = run.request.target_url
        try:
            snapshot = await self.archive.lookup(url)
        except ArchiveLookupError as e:
            logger.warning(f"Archive lookup failed for {url}: {e}")
            return Advance(RetrievalState.SCREENSHOT_ATTEMPT, f"lookup failed: {e}", e)

        if not snapshot.available or not snapshot.snapshot_url:
            logger.warning(f"No archived snapshot available for {url}")
            return Advance(RetrievalState.SCREENSHOT_ATTEMPT, "no archived snapshot available")

        try:
            content = await self._render(run, snapshot.snapshot_url, self.settings.ARCHIVE_TIMEOUT_MS)
        except NavigationError as e:
            logger.warning(f"Archived snapshot {snapshot.snapshot_url} failed to render: {e}")
            return Advance(RetrievalState.SCREENSHOT_ATTEMPT, f"snapshot navigation failed: {e}", e)

        return RetrievalOutcome(
            method=RetrievalMethod.ARCHIVED,
            source_url=snapshot.snapshot_url,
            html=content,
            summary=extract(content),
        )

    async def _attempt_screenshot(self, run: _Run) -> Step:
        url = run.request.target_url
        screenshot_path = run.request.screenshot_path

        try:
            renderer = await run.browser()
        except NavigationError as e:
            logger.error(f"No browser session for screenshot of {url}: {e}")
            error = CaptureError(f"Browser unavailable for screenshot: {e}")
            error.__cause__ = e
            return Advance(RetrievalState.FAILED, f"browser unavailable: {e}", error)

        # Best effort: a partially parsed DOM can still be captured
        try:
            await renderer.navigate(url, WaitPolicy.DOM_PARSED, self.settings.SCREENSHOT_TIMEOUT_MS)
        except NavigationError as e:
            logger.warning(f"Screenshot navigation incomplete for {url}, capturing anyway: {e}")

        try:
            await renderer.screenshot(screenshot_path)
        except CaptureError as e:
            logger.error(f"Screenshot capture failed for {url}: {e}")
            return Advance(RetrievalState.FAILED, f"capture failed: {e}", e)

        return RetrievalOutcome(
            method=RetrievalMethod.SCREENSHOT,
            source_url=url,
            html=build_placeholder(url, screenshot_path),
            screenshot_path=screenshot_path,
        )
