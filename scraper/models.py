"""
Data model for a single retrieval run.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath

SCREENSHOT_SUFFIX = "_screenshot.png"


class RetrievalMethod(str, Enum):
    """Strategies in fallback order."""
    DIRECT = "direct"
    ARCHIVED = "archived"
    SCREENSHOT = "screenshot"

    @property
    def rank(self) -> int:
        return list(RetrievalMethod).index(self)


class WaitPolicy(str, Enum):
    """When a navigation counts as complete."""
    NETWORK_QUIESCENT = "networkidle"
    DOM_PARSED = "domcontentloaded"


def derive_screenshot_path(output_path: str) -> str:
    """Replace the output file's extension with the screenshot suffix."""
    path = PurePath(output_path)
    if path.suffix:
        return str(path.with_name(path.stem + SCREENSHOT_SUFFIX))
    return output_path + SCREENSHOT_SUFFIX


@dataclass(frozen=True)
class RetrievalRequest:
    """Immutable input to one orchestration run."""
    target_url: str
    output_path: str

    @property
    def screenshot_path(self) -> str:
        return derive_screenshot_path(self.output_path)


@dataclass(frozen=True)
class Heading:
    level: int
    text: str

    @property
    def tag(self) -> str:
        return f"H{self.level}"


@dataclass(frozen=True)
class ExtractionSummary:
    """Structural summary of a rendered document."""
    title: str
    paragraphs: tuple[str, ...] = ()
    headings: tuple[Heading, ...] = ()


@dataclass(frozen=True)
class ArchiveSnapshot:
    """Result of an archive availability lookup."""
    available: bool
    snapshot_url: str | None = None
    timestamp: str | None = None


@dataclass
class RetrievalOutcome:
    """The artifact produced by a run, and how it was obtained."""
    method: RetrievalMethod
    source_url: str
    html: str
    screenshot_path: str | None = None
    summary: ExtractionSummary | None = None
    causes: list[str] = field(default_factory=list)  # why earlier strategies were skipped
