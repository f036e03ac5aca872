"""
Article Scraper

Retrieves the rendered content of a single article with escalating
fallbacks: direct render, archived snapshot, then a screenshot placeholder.
"""

__version__ = "1.0.0"
