"""
HTTP capability: a thin wrapper around a requests.Session.

Performs one blocking GET and hands back a RawResponse echoing the
parameters that were actually sent. Anything beyond that (parsing,
normalizing, caching) happens in the executor.
"""
import json
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import requests

from errors import RequestError
import config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawResponse:
    url: str
    params: Tuple[Tuple[str, str], ...]
    status_code: int
    text: str
    elapsed_ms: int = 0

    def param(self, name: str) -> Optional[str]:
        """Value of an echoed request parameter, or None if it was not sent."""
        for key, value in self.params:
            if key == name:
                return value
        return None

    def json(self):
        return json.loads(self.text)


class HttpTransport:
    """Blocking GET transport with a shared session and a fixed timeout."""

    def __init__(self, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout or config.REQUEST_TIMEOUT
        if session is None:
            session = requests.Session()
            session.headers["User-Agent"] = config.USER_AGENT
        self._session = session

    def get(self, url: str, params: Sequence[Tuple[str, str]]) -> RawResponse:
        sent = tuple(params)
        logger.debug("GET %s %s", url, sent)
        try:
            r = self._session.get(url, params=list(sent), timeout=self.timeout)
        except requests.RequestException as e:
            raise RequestError(f"Network error: {e}", url=url) from e

        raw = RawResponse(
            url=r.url or url,
            params=sent,
            status_code=r.status_code,
            text=r.text,
            elapsed_ms=int(r.elapsed.total_seconds() * 1000) if r.elapsed else 0,
        )
        if r.status_code >= 400:
            raise RequestError(
                f"HTTP {r.status_code} from {url}: {r.text[:300]}",
                url=url, status_code=r.status_code, response=raw,
            )
        return raw

    def close(self):
        self._session.close()
