"""
Retrieval of raw source bodies from URLs or local files.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from .config import DEFAULT_TIMEOUT


@dataclass(frozen=True)
class FetchResult:
    source: str
    status: Optional[int]
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300

    @property
    def text(self) -> str:
        """Body decoded as UTF-8; raises ``UnicodeDecodeError`` (a ``ValueError``)."""
        return self.content.decode("utf-8")


def is_url(source: str | Path) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def fetch_resource(source: str | Path, *, timeout: float = DEFAULT_TIMEOUT) -> FetchResult:
    """Fetch ``source`` and return its status and raw body.

    A non-success HTTP status or a missing local file is reported through
    ``status`` rather than raised.  Transport problems (DNS, refused
    connection, timeouts, unreadable files) propagate as
    ``requests.RequestException`` or ``OSError``.  The body is kept as bytes
    so that decoding errors surface where the body is parsed.
    """
    source_str = str(source)
    if is_url(source_str):
        response = requests.get(source_str, timeout=timeout)
        return FetchResult(source_str, response.status_code, response.content)

    path = Path(source)
    if not path.exists():
        return FetchResult(source_str, 404)
    return FetchResult(source_str, 200, path.read_bytes())
