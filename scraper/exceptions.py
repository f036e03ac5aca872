"""
Error taxonomy for the retrieval pipeline.

Navigation and archive lookup errors are recovered by the orchestrator by
advancing to the next strategy. Capture and config errors are terminal.
"""


class ScraperError(Exception):
    """Base class for all scraper errors."""
    pass


class NavigationError(ScraperError):
    """Raised when the browser could not load a page."""
    pass


class NavigationTimeoutError(NavigationError):
    """Raised when navigation did not settle within its timeout."""
    pass


class ArchiveLookupError(ScraperError):
    """Raised when the archive availability API is unreachable or fails."""
    pass


class ParseError(ArchiveLookupError):
    """Raised when the archive availability API returns a malformed body."""
    pass


class CaptureError(ScraperError):
    """Raised when a screenshot could not be captured."""
    pass


class ConfigError(ScraperError):
    """Raised for malformed configuration or an unusable target URL."""
    pass


class ExtractionError(ScraperError):
    """Raised when extraction is asked to summarize a placeholder document."""
    pass


class RetrievalError(ScraperError):
    """
    Raised when every retrieval strategy failed.

    The last underlying exception is kept on ``cause`` (and chained as
    ``__cause__`` by the orchestrator).
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        message = super().__str__()
        if self.cause is not None:
            return f"{message}: {type(self.cause).__name__}: {self.cause}"
        return message
