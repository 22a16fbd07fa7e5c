"""Small JSON-over-HTTP helper for the exchange-rate feed.

Stdlib urllib only. Network failures, truncated bodies, bad payloads and 5xx
answers are retried with exponential backoff; 4xx answers fail immediately.
"""

from __future__ import annotations

import http.client
import json
import logging
import time
import urllib.error
import urllib.request
from typing import Any, Dict, Optional

from immiplan import __version__

logger = logging.getLogger("immiplan.http")

USER_AGENT = f"immiplan/{__version__}"


class HttpError(Exception):
    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def _fetch(url: str, timeout: float) -> Dict[str, Any]:
    req = urllib.request.Request(
        url, headers={"Accept": "application/json", "User-Agent": USER_AGENT}
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:  # nosec B310
            body = resp.read()
    except urllib.error.HTTPError as e:
        raise HttpError(f"HTTP {e.code} for {url}", status=e.code) from e
    try:
        payload = json.loads(body.decode("utf-8"))
    except ValueError as e:
        raise HttpError(f"invalid JSON from {url}") from e
    if not isinstance(payload, dict):
        raise HttpError(f"expected a JSON object from {url}")
    return payload


def get_json(
    url: str, *, timeout: float = 5.0, retries: int = 2, backoff: float = 0.5
) -> Dict[str, Any]:
    """GET `url` and return the decoded JSON object, retrying transient failures."""
    attempt = 0
    while True:
        try:
            return _fetch(url, timeout)
        except HttpError as e:
            if e.status is not None and e.status < 500:
                raise
            err: Exception = e
        except (urllib.error.URLError, http.client.HTTPException, OSError) as e:
            err = e
        logger.debug("GET %s failed (attempt %d): %s", url, attempt + 1, err)
        if attempt >= retries:
            raise HttpError(f"giving up on {url} after {attempt + 1} attempts: {err}")
        time.sleep(backoff * (2**attempt))
        attempt += 1
