"""
Command-line entry point.

Usage:
    scrape https://example.com/article
    scrape --config=site.json
    scrape https://example.com/article --output out/article.html -v
"""

import asyncio
import logging
import sys

import click

from .config import DEFAULT_CONFIG_PATH, get_settings, load_config_file, resolve_request
from .exceptions import ScraperError
from .models import RetrievalOutcome
from .orchestrator import RetrievalOrchestrator

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO", verbose: bool = False) -> None:
    """Configure root logging for a CLI run."""
    resolved = logging.DEBUG if verbose else getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=resolved,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )


def report(outcome: RetrievalOutcome, output_path: str) -> None:
    """Print a human-readable summary of a run."""
    click.echo(f"Method: {outcome.method.value}")
    click.echo(f"Source: {outcome.source_url}")
    click.echo(f"Content saved to {output_path}")

    if outcome.screenshot_path:
        click.echo(f"Screenshot saved to {outcome.screenshot_path}")

    if outcome.summary is not None:
        click.echo(f"\nPage Title: {outcome.summary.title}")
        click.echo(f"\nFound {len(outcome.summary.paragraphs)} paragraphs")
        click.echo(f"Found {len(outcome.summary.headings)} headings")


@click.command()
@click.argument("url", required=False)
@click.option(
    "--config",
    "config_path",
    default=None,
    help=f"JSON config file with 'url' and optional 'scrapeOutput'. [default: {DEFAULT_CONFIG_PATH}, if present]",
)
@click.option("--output", "-o", "output_path", default=None, help="Output HTML file (overrides config).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="article-scraper")
def main(url: str | None, config_path: str | None, output_path: str | None, verbose: bool) -> None:
    """Retrieve the rendered content of URL with archive and screenshot fallbacks."""
    try:
        runtime = get_settings()
    except ScraperError as e:
        raise click.ClickException(str(e))

    setup_logging(runtime.LOG_LEVEL, verbose)

    # Only the implicit default config file may be absent
    try:
        request = resolve_request(
            argv_url=url,
            file_config=load_config_file(
                config_path or DEFAULT_CONFIG_PATH,
                required=config_path is not None,
            ),
            output_path=output_path,
        )
    except ScraperError as e:
        raise click.ClickException(str(e))

    click.echo(f"Scraping: {request.target_url}")

    try:
        outcome = asyncio.run(RetrievalOrchestrator(settings=runtime).retrieve(request))
    except ScraperError as e:
        logger.debug("Retrieval failed", exc_info=True)
        raise click.ClickException(str(e))

    report(outcome, request.output_path)


if __name__ == "__main__":
    main()
