"""Lightweight HTTP client for covid19mx."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

import requests

from .errors import HttpClientError

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"


@dataclass(frozen=True)
class HttpClientConfig:
    """Configuration for HTTP requests."""

    timeout_sec: int
    user_agent: str


class HttpClient:
    """Minimal requests-based HTTP client.

    Requests are issued one at a time and never retried: the first transport
    error or non-200 response is raised as HttpClientError.
    """

    def __init__(self, config: HttpClientConfig, logger: logging.Logger | None = None) -> None:
        self._config = config
        self._session = requests.Session()
        self._session.headers.update({"User-Agent": config.user_agent})
        self._logger = logger or logging.getLogger("covid19mx.http")

    def get_bytes(self, url: str) -> bytes:
        """Perform a GET request and return raw bytes."""
        return self._request("GET", url).content

    def post_json(self, url: str) -> bytes:
        """POST an empty JSON request (ASP.NET page method) and return the body."""
        response = self._request("POST", url, headers={"Content-Type": JSON_CONTENT_TYPE})
        return response.content

    def post_form(self, url: str, fields: Mapping[str, str]) -> bytes:
        """POST url-encoded form fields and return the body."""
        return self._request("POST", url, data=dict(fields)).content

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        self._logger.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                timeout=self._config.timeout_sec,
                allow_redirects=True,
                **kwargs,
            )
        except requests.RequestException as exc:
            self._logger.warning("HTTP error (%s %s): %s", method, url, exc)
            raise HttpClientError(f"{method} {url} failed: {exc}") from exc
        if response.status_code != 200:
            raise HttpClientError(
                f"{method} {url} failed with status {response.status_code}: "
                f"{_snippet(response.text)}",
                status_code=response.status_code,
            )
        return response


def _snippet(text: str, limit: int = 200) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit] + "..."
