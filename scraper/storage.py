"""
Output persistence.

The artifact is written once per run, replacing any prior content. The
write goes through a sibling temp file so a failed write never leaves a
truncated output behind.
"""

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def write_output(output_path: str, html: str) -> Path:
    """
    Write the retrieved markup to ``output_path`` as UTF-8.

    Args:
        output_path: Destination file; parent directories are created
        html: Markup to persist

    Returns:
        The resolved destination path
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(html)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info(f"Content saved to {path} ({len(html.encode('utf-8'))} bytes)")
    return path
