"""
Browser and archive collaborators for the retrieval pipeline.

This module provides:
- JavaScript rendering and screenshots (Playwright, loaded lazily)
- Wayback Machine availability lookup
"""

from .js_renderer import JSRenderer, create_renderer
from .archive import ArchiveLookup, WAYBACK_AVAILABILITY_URL

__all__ = [
    "JSRenderer",
    "create_renderer",
    "ArchiveLookup",
    "WAYBACK_AVAILABILITY_URL",
]
