"""Document fetching for the loader.

``http://`` and ``https://`` URLs go through :mod:`requests`; ``file://``
URLs and plain paths are read from disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def fetch_text(url: str, *, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Return the text body at *url*.

    Raises:
        requests.RequestException: HTTP transport failure or non-2xx status.
        FileNotFoundError: a local path does not exist.
    """
    parsed = urlparse(url)
    if parsed.scheme in ("http", "https"):
        logger.debug("Fetching %s", url)
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.text

    path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
    if not path.is_file():
        msg = f"Document not found: {path}"
        raise FileNotFoundError(msg)
    return path.read_text(encoding="utf-8")
