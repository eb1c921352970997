"""HTTP retrieval of the feed.

Uses only the Python standard library, like the rest of the project's I/O.

Important:
    - MapShare feeds protected by a password expect HTTP Basic auth with an empty
      user name and the password as the secret.
    - There is no retry: a failed fetch aborts the run.
"""

from __future__ import annotations

import base64
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass

from hike_map.errors import RetrievalError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FetchConfig:
    """Configuration for feed requests."""

    timeout_seconds: float = 30.0
    user_agent: str = "hike-map/0.1.0 (feed-fetch)"


def basic_auth_header(password: str, user: str = "") -> str:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def fetch_url(url: str, credential: str | None = None, cfg: FetchConfig | None = None) -> bytes:
    """GET a URL and return the response body.

    Args:
        url: Feed URL.
        credential: Optional feed password (sent as Basic auth with empty user).
        cfg: FetchConfig.

    Returns:
        Raw body bytes.

    Raises:
        RetrievalError: On transport errors, timeouts or a non-200 status.
    """

    cfg = cfg or FetchConfig()
    headers = {"User-Agent": cfg.user_agent}
    if credential:
        headers["Authorization"] = basic_auth_header(credential)
    req = urllib.request.Request(url, headers=headers, method="GET")

    logger.info("fetching %s", url)
    try:
        with urllib.request.urlopen(req, timeout=cfg.timeout_seconds) as resp:  # noqa: S310
            status = resp.status
            if status != 200:
                raise RetrievalError(f"Status error: {status}（{url}）")
            body = resp.read()
    except urllib.error.HTTPError as exc:
        raise RetrievalError(f"Status error: {exc.code}（{url}）") from exc
    except (urllib.error.URLError, TimeoutError, OSError) as exc:
        raise RetrievalError(f"GET error: {exc}（{url}）") from exc

    logger.debug("fetched %s bytes from %s", len(body), url)
    return body
