"""Shared HTTP client wrapper with bounded timeouts."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlsplit

import requests
from requests import Response, Session
from requests.exceptions import JSONDecodeError, RequestException, Timeout

logger = logging.getLogger(__name__)


class HTTPClientError(RuntimeError):
    """Raised when the HTTP client cannot satisfy a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class HTTPClientConfig:
    """Configuration for the shared HTTP client."""

    base_url: str
    connect_timeout: float = 2.0
    read_timeout: float = 5.0

    @property
    def timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


def validate_base_url(base_url: str | None, *, setting: str) -> str:
    """Return ``base_url`` if it is an absolute http(s) URL with a host.

    Raises:
        ValueError: If the URL is blank, relative, or uses another scheme.
    """

    if not base_url or not base_url.strip():
        raise ValueError(f"{setting} must not be blank")
    parts = urlsplit(base_url.strip())
    if parts.scheme.lower() not in {"http", "https"}:
        raise ValueError(f"{setting} must use http/https")
    if not parts.hostname:
        raise ValueError(f"{setting} must be an absolute URL with a host")
    return base_url.strip()


class HTTPClient:
    """Small HTTP client performing a single bounded GET per call.

    Retries are applied one level up so that every physical call is
    visible to the caller.
    """

    def __init__(
        self,
        config: HTTPClientConfig,
        session: Optional[Session] = None,
    ) -> None:
        self._config = config
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        url = self._build_url(path)
        try:
            response = self._session.get(url, params=params, timeout=self._config.timeout)
        except Timeout as exc:
            logger.warning("HTTP request to %s timed out: %s", url, exc)
            raise HTTPClientError(f"Timed out fetching {url}: {exc}") from exc
        except RequestException as exc:
            logger.warning("HTTP request to %s failed: %s", url, exc)
            raise HTTPClientError(f"Failed to fetch {url}: {exc}") from exc
        return self._handle_response(response)

    def _build_url(self, path: str) -> str:
        base = self._config.base_url.rstrip("/")
        suffix = path.lstrip("/")
        return f"{base}/{suffix}"

    @staticmethod
    def _handle_response(response: Response) -> Dict[str, Any]:
        status = response.status_code
        if status >= 500:
            raise HTTPClientError(f"Server error {status}", status_code=status)
        if status >= 400:
            raise HTTPClientError(f"Client error {status}: {response.text}", status_code=status)
        if status < 200 or status >= 300:
            raise HTTPClientError(f"Unexpected status {status}", status_code=status)

        try:
            payload = response.json()
        except (JSONDecodeError, ValueError) as exc:
            raise HTTPClientError("Invalid JSON response", status_code=status) from exc

        if not isinstance(payload, dict):
            raise HTTPClientError("Expected a JSON object response", status_code=status)
        return payload


def client_from_config(config: Mapping[str, Any], url_key: str, default_url: str | None = None) -> HTTPClient:
    """Build an :class:`HTTPClient` for the base URL stored under ``url_key``."""

    base_url = validate_base_url(config.get(url_key) or default_url, setting=url_key)
    return HTTPClient(
        HTTPClientConfig(
            base_url=base_url,
            connect_timeout=float(config.get("PROVIDERS_CONNECT_TIMEOUT_SECONDS", 2)),
            read_timeout=float(config.get("PROVIDERS_READ_TIMEOUT_SECONDS", 5)),
        )
    )
