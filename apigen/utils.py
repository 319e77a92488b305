"""Utility functions for loading API schema documents.

This module provides functions for loading the schema from files, URLs and
raw text with proper error handling and validation.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


class SchemaLoaderError(Exception):
    """Custom exception for schema loading errors."""

    pass


def _check_document(data: Any, source: str) -> dict:
    if not isinstance(data, dict):
        raise SchemaLoaderError(f"Schema document from {source} must be a JSON object")
    return data


def load_schema_from_text(text: str | bytes, source: str = "<text>") -> dict:
    """Parse a schema document from raw JSON text.

    Raises:
        SchemaLoaderError: If the text is not a JSON object.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in %s: %s", source, e)
        raise SchemaLoaderError(f"Invalid JSON in {source}: {e}") from e
    return _check_document(data, source)


def load_schema_from_file(file_path: str | Path) -> tuple[str, dict]:
    """Load the schema document from a local file.

    Args:
        file_path: Path to the JSON file.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        FileNotFoundError: If file doesn't exist.
        SchemaLoaderError: If file cannot be read or JSON is invalid.
    """
    file_path = Path(file_path).expanduser()
    logger.debug("Attempting to load schema from file: %s", file_path)

    if not file_path.exists():
        logger.error("File not found: %s", file_path)
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() != ".json":
        logger.warning("File does not have .json extension: %s", file_path)
        # Don't raise, just warn - might still be valid JSON

    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e, exc_info=True)
        raise SchemaLoaderError(f"Error reading file {file_path}: {e}") from e

    data = load_schema_from_text(text, str(file_path))
    logger.info("Successfully loaded schema from %s", file_path)
    return str(file_path), data


def load_schema_from_url(url: str, timeout: int = 30) -> tuple[str, dict]:
    """Load the schema document from a URL.

    Args:
        url: URL to fetch JSON from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        SchemaLoaderError: If URL is invalid, request fails, or response isn't valid JSON.
    """
    logger.debug("Attempting to load schema from URL: %s", url)

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error("Invalid URL format: %s", url)
        raise SchemaLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()

        content_type = response.headers.get("content-type", "").lower()
        if "application/json" not in content_type and not url.endswith(".json"):
            logger.warning("URL %s does not have JSON content type: %s", url, content_type)

        data = response.json()
    except requests.exceptions.Timeout:
        logger.error("Request timeout for URL: %s", url)
        raise SchemaLoaderError(f"Request timeout for URL: {url}")
    except requests.exceptions.ConnectionError as e:
        logger.error("Connection error for URL %s: %s", url, e)
        raise SchemaLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error("HTTP error %s for URL: %s", e.response.status_code, url)
        raise SchemaLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.JSONDecodeError as e:
        logger.error("Invalid JSON response from URL %s: %s", url, e)
        raise SchemaLoaderError(f"Invalid JSON response from URL {url}: {e}") from e
    except requests.exceptions.RequestException as e:
        logger.error("Request error for URL %s: %s", url, e, exc_info=True)
        raise SchemaLoaderError(f"Request error for URL {url}: {e}") from e

    logger.info("Successfully loaded schema from %s", url)
    return url, _check_document(data, url)


def load_schema(
    file_path: str | Path | None = None,
    url: str | None = None,
    text: str | bytes | None = None,
    timeout: int = 30,
) -> tuple[str, dict]:
    """Load the schema document from exactly one of a file, URL or raw text.

    Args:
        file_path: Path to local JSON file.
        url: URL to fetch JSON from.
        text: Raw JSON text.
        timeout: Request timeout in seconds (only used for URLs).

    Returns:
        Tuple of (source description, parsed document).

    Raises:
        SchemaLoaderError: If not exactly one source is given, or loading fails.
        FileNotFoundError: If file doesn't exist.
    """
    given = [s for s in (file_path, url, text) if s]
    if not given:
        logger.error("No schema source provided")
        raise SchemaLoaderError("One of file_path, url or text must be provided")

    if len(given) > 1:
        logger.error("Several schema sources provided")
        raise SchemaLoaderError("Specify only one of file_path, url or text")

    if file_path:
        return load_schema_from_file(file_path)
    if url:
        return load_schema_from_url(url, timeout)
    return "<text>", load_schema_from_text(text)
