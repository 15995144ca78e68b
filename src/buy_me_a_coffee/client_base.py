from __future__ import annotations

import logging
from re import Pattern
from typing import Any, Dict, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .version import __version__


logger = logging.getLogger(__name__)

# Longest slice of a response body kept on an error for diagnosis.
BODY_SNIPPET_LIMIT = 500


class APIClientError(RuntimeError):
    """Base error for API client failures."""


class APIClientTransportError(APIClientError):
    """Raised when the request never produced an HTTP response."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class APIClientTimeout(APIClientTransportError):
    """Raised when request times out."""


class APIClientHTTPError(APIClientError):
    """Raised for non-success HTTP responses."""

    def __init__(
        self,
        status_code: int,
        message: str,
        body: Optional[str] = None,
        url: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.body = body
        self.url = url
        super().__init__(f"HTTP {status_code} returned from {url}: {message}")


class APIClientEmptyResult(APIClientError):
    """
    Raised when the API answers with its "No <resource>" message.

    This is not a failed call: the account simply has no records of the
    requested kind yet. Callers should treat it as zero items.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class APIClientDeserializationError(APIClientError):
    """Raised when a response body is not the JSON shape we expect."""

    def __init__(self, detail: str, url: Optional[str] = None) -> None:
        super().__init__(f"Unexpected response from {url}: {detail}")
        self.detail = detail
        self.url = url


def _snippet(text: Optional[str]) -> str:
    if not text:
        return ""
    text = text.strip()
    if len(text) > BODY_SNIPPET_LIMIT:
        return text[:BODY_SNIPPET_LIMIT] + "..."
    return text


def _error_message(
    payload: Any, keys: Tuple[str, ...] = ("message", "error", "reason")
) -> Optional[str]:
    """Pull the human readable message out of an API error object."""
    if not isinstance(payload, dict):
        return None
    for key in keys:
        val = payload.get(key)
        if isinstance(val, str) and val.strip():
            return val.strip()
    return None


class BaseAPIClient:
    """
    Reusable base HTTP client for the Buy Me a Coffee API.

    Features:
    - Persistent session
    - Default headers
    - Configurable timeout
    - Opt-in transport retries (off by default)
    - Safe JSON parsing mapped onto typed errors
    """

    DEFAULT_TIMEOUT = 15  # seconds
    DEFAULT_RETRIES = 0
    DEFAULT_BACKOFF_FACTOR = 0.5

    def __init__(
        self,
        base_url: str,
        default_headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_factor: Optional[float] = None,
    ) -> None:

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT

        self.session = requests.Session()

        headers = {
            "User-Agent": f"buy-me-a-coffee-py/{__version__}",
            "Accept": "application/json",
        }

        if default_headers:
            headers.update(default_headers)

        self.session.headers.update(headers)

        retry_strategy = Retry(
            total=retries if retries is not None else self.DEFAULT_RETRIES,
            backoff_factor=backoff_factor if backoff_factor is not None else self.DEFAULT_BACKOFF_FACTOR,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

    # ---------------------------------------------------
    # Core request method
    # ---------------------------------------------------
    def get_json(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        empty_sentinel: Optional[Pattern[str]] = None,
    ) -> Any:
        """
        Send GET request and return parsed JSON.

        Every failure is raised as an APIClientError subclass. When
        ``empty_sentinel`` is given, an error message matching it is raised
        as APIClientEmptyResult instead of an HTTP error.
        """

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            response = self.session.get(
                url,
                params=params,
                timeout=self.timeout,
            )
        except requests.Timeout as e:
            raise APIClientTimeout(
                f"Request timed out calling {url}", url=url
            ) from e
        except requests.RequestException as e:
            raise APIClientTransportError(
                f"Request failed calling {url}", url=url
            ) from e

        status = response.status_code
        logger.debug("GET %s params=%s -> %s", url, params, status)

        success = 200 <= status < 300

        # Unauthenticated agents get redirected to the HTML login page, which
        # ends in a 2xx instead of a 401. HTML error pages keep their status.
        content_type = (response.headers or {}).get("Content-Type", "")
        if success and "html" in content_type.lower():
            raise APIClientHTTPError(401, "Unauthorized", url=url)

        try:
            payload = response.json()
        except ValueError as e:
            body = _snippet(response.text)
            if success:
                raise APIClientDeserializationError(
                    f"invalid JSON body: {body!r}", url=url
                ) from e
            raise APIClientHTTPError(status, body or "", body=body, url=url) from e

        if success:
            # A 2xx can still carry an error object instead of data.
            if isinstance(payload, dict) and "data" not in payload:
                message = _error_message(payload)
                if (
                    message is not None
                    and empty_sentinel is not None
                    and empty_sentinel.search(message)
                ):
                    raise APIClientEmptyResult(message, status_code=status)
                message = _error_message(payload, keys=("error", "reason"))
                if message is not None:
                    self._raise_for_message(
                        payload, message, status, url, empty_sentinel, response.text
                    )
            return payload

        message = _error_message(payload)
        if message is None:
            message = _snippet(response.text)
        self._raise_for_message(
            payload, message, status, url, empty_sentinel, response.text
        )

    @staticmethod
    def _raise_for_message(
        payload: Any,
        message: str,
        status: int,
        url: str,
        empty_sentinel: Optional[Pattern[str]],
        body: Optional[str],
    ) -> None:
        if empty_sentinel is not None and empty_sentinel.search(message):
            logger.debug("Empty result from %s: %s", url, message)
            raise APIClientEmptyResult(message, status_code=status)

        error_code = payload.get("error_code") if isinstance(payload, dict) else None
        if 200 <= status < 300 and isinstance(error_code, int):
            status = error_code

        raise APIClientHTTPError(
            status,
            message,
            body=_snippet(body),
            url=url,
        )
