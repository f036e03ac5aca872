"""
Configuration and request resolution.

Runtime tunables come from the environment (optionally a .env file).
The target URL and output path are resolved from an explicit parameter,
the command line, a JSON config file, and a hardcoded fallback, in that
order of precedence.
"""

import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .exceptions import ConfigError
from .models import RetrievalRequest
from .url_validator import validate_target_url

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_OUTPUT_PATH = "scrape.html"
DEFAULT_URL = "https://grokipedia.com/page/2012_Aurora_theater_shooting"


def _parse_bool(value: str | None, default: bool = False) -> bool:
    """Parse boolean from environment variable."""
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _parse_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {value!r}")


class Settings:
    """
    Runtime settings from environment.

    Values are read when an instance is built.

    Raises:
        ConfigError: If an integer setting is not a valid integer
    """

    def __init__(self):
        # Per-strategy navigation timeouts in milliseconds
        self.DIRECT_TIMEOUT_MS: int = _parse_int("SCRAPER_DIRECT_TIMEOUT_MS", 30000)
        self.ARCHIVE_TIMEOUT_MS: int = _parse_int("SCRAPER_ARCHIVE_TIMEOUT_MS", 30000)
        self.SCREENSHOT_TIMEOUT_MS: int = _parse_int("SCRAPER_SCREENSHOT_TIMEOUT_MS", 15000)

        # Archive availability API request timeout in seconds
        self.LOOKUP_TIMEOUT: int = _parse_int("SCRAPER_LOOKUP_TIMEOUT", 30)

        self.HEADLESS: bool = _parse_bool(os.getenv("SCRAPER_HEADLESS"), default=True)
        self.USER_AGENT: str = os.getenv("SCRAPER_USER_AGENT", "")
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Shared Settings instance, built on first use.

    Raises:
        ConfigError: If an integer setting is not a valid integer
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_config_file(path: str | Path = DEFAULT_CONFIG_PATH, required: bool = False) -> dict[str, Any]:
    """
    Read the JSON config file.

    A missing file yields an empty mapping unless ``required`` is set.

    Raises:
        ConfigError: If a required file is missing, the file cannot be read,
            or it is not a JSON object
    """
    path = Path(path)
    if not path.exists():
        if required:
            raise ConfigError(f"Config file {path} does not exist")
        return {}

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Malformed config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    return data


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"Config field '{key}' must be a string")
    return value or None


def resolve_request(
    url: str | None = None,
    argv_url: str | None = None,
    file_config: dict[str, Any] | None = None,
    output_path: str | None = None,
) -> RetrievalRequest:
    """
    Build the RetrievalRequest for a run.

    URL precedence: explicit ``url`` > ``argv_url`` > config ``url`` >
    DEFAULT_URL. Output precedence: explicit ``output_path`` > config
    ``scrapeOutput`` > DEFAULT_OUTPUT_PATH.

    Raises:
        ConfigError: If a config field has the wrong type or the URL is invalid
    """
    file_config = file_config or {}
    file_url = _optional_str(file_config, "url")
    file_output = _optional_str(file_config, "scrapeOutput")

    target = url or argv_url or file_url or DEFAULT_URL
    output = output_path or file_output or DEFAULT_OUTPUT_PATH

    return RetrievalRequest(target_url=validate_target_url(target), output_path=output)
