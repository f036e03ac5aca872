"""
Extraction - Superficial structural summary of a rendered document.

Produces the title (first h1), paragraph texts and heading tag/text pairs.
This is a pure transform; it must never see the synthesized placeholder.
"""

from bs4 import BeautifulSoup

from .exceptions import ExtractionError
from .models import ExtractionSummary, Heading

NO_TITLE = "No title found"

# Marker embedded in the synthesized placeholder document
PLACEHOLDER_META_NAME = "scraper-placeholder"

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def is_placeholder(html: str) -> bool:
    """Check if the markup is a synthesized screenshot placeholder."""
    soup = BeautifulSoup(html, "html.parser")
    return soup.find("meta", attrs={"name": PLACEHOLDER_META_NAME}) is not None


def extract(rendered_html: str) -> ExtractionSummary:
    """
    Summarize a rendered document.

    Args:
        rendered_html: Serialized markup of a real rendered page

    Returns:
        ExtractionSummary with title, paragraphs and headings in document order

    Raises:
        ExtractionError: If given the synthesized placeholder document
    """
    soup = BeautifulSoup(rendered_html, "html.parser")

    if soup.find("meta", attrs={"name": PLACEHOLDER_META_NAME}) is not None:
        raise ExtractionError("Refusing to extract from a placeholder document")

    # Title is the raw text of the first h1, untrimmed
    title = NO_TITLE
    if h1 := soup.find("h1"):
        title = h1.get_text() or NO_TITLE

    # Empty paragraphs are kept so counts match the document
    paragraphs = tuple(p.get_text().strip() for p in soup.find_all("p"))

    headings = tuple(
        Heading(level=int(tag.name[1]), text=tag.get_text().strip())
        for tag in soup.find_all(HEADING_TAGS)
    )

    return ExtractionSummary(title=title, paragraphs=paragraphs, headings=headings)
