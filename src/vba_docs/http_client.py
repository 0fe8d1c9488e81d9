from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from typing import Any

import requests
from requests import exceptions as req_exc

from . import __version__

logger = logging.getLogger(__name__)

USER_AGENT = f"vba-docs/{__version__}"
ACCEPT_JSON = "application/json"
ACCEPT_HTML = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"


class FetchError(RuntimeError):
    pass


@dataclass(frozen=True)
class FetchResult:
    url: str
    final_url: str
    status_code: int
    reason: str
    headers: dict[str, str]
    fetched_at: float
    body: bytes

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        # Raises ValueError (json.JSONDecodeError / UnicodeDecodeError).
        return json.loads(self.body.decode("utf-8"))


class HttpClient:
    """Single-shot GET client.

    Each call makes exactly one request bounded by ``timeout_s``. Failed
    requests are not retried.
    """

    def __init__(
        self,
        session: requests.Session,
        *,
        timeout_s: float = 15.0,
        api_key: str | None = None,
    ) -> None:
        self._session = session
        self._timeout_s = timeout_s
        self._api_key = api_key

    def _headers(self, *, accept: str, authorize: bool) -> dict[str, str]:
        headers = {"User-Agent": USER_AGENT, "Accept": accept}
        if authorize and self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def get(
        self,
        url: str,
        *,
        accept: str = ACCEPT_JSON,
        authorize: bool = True,
    ) -> FetchResult:
        logger.debug("GET %s", url)
        try:
            resp = self._session.get(
                url,
                timeout=self._timeout_s,
                headers=self._headers(accept=accept, authorize=authorize),
            )
        except req_exc.RequestException as e:
            raise FetchError(f"Failed to fetch {url}: {e}") from e

        # Callers decide what a non-2xx status means for them.
        return FetchResult(
            url=url,
            final_url=str(resp.url or url),
            status_code=int(resp.status_code),
            reason=str(resp.reason or ""),
            headers={k: str(v) for k, v in resp.headers.items()},
            fetched_at=time.time(),
            body=resp.content or b"",
        )
