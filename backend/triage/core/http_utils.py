"""
HTTP Utilities

Shared error handling for outbound HTTP calls. Every httpx failure is
translated into HTTPRequestError so callers deal with a single exception type.
"""

import logging
from typing import Optional

import httpx

from triage.core.metrics import track_external_api

logger = logging.getLogger(__name__)


class HTTPRequestError(Exception):
    """Base exception for HTTP request failures."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_retryable(self) -> bool:
        """Transport errors, rate limits and server errors are worth another attempt."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


async def post_json(
    client: httpx.AsyncClient,
    url: str,
    data: dict,
    headers: Optional[dict] = None,
    timeout: Optional[float] = None,
    service_name: str = "External API",
) -> dict:
    """
    POST JSON to a URL and return the decoded response body.

    Args:
        client: Open httpx client to send the request with
        url: The URL to post to
        data: JSON data to send
        headers: Optional request headers
        timeout: Per-request timeout in seconds (client default if None)
        service_name: Name for logging and metrics

    Raises:
        HTTPRequestError: on timeouts, connection errors, non-2xx responses
            and undecodable bodies
    """
    request_kwargs = {"json": data, "headers": headers}
    if timeout is not None:
        request_kwargs["timeout"] = timeout

    try:
        with track_external_api(service_name):
            response = await client.post(url, **request_kwargs)
            response.raise_for_status()
            return response.json()
    except httpx.TimeoutException as e:
        raise _request_failed(f"Timeout posting to {service_name}") from e
    except httpx.ConnectError as e:
        raise _request_failed(f"Connection error posting to {service_name}: {e}") from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        raise _request_failed(f"HTTP {status} posting to {service_name}", status) from e
    except httpx.HTTPError as e:
        raise _request_failed(f"HTTP error posting to {service_name}: {e}") from e
    except ValueError as e:
        raise _request_failed(f"Invalid JSON from {service_name}: {e}") from e


def _request_failed(message: str, status_code: Optional[int] = None) -> HTTPRequestError:
    logger.warning(message)
    return HTTPRequestError(message, status_code=status_code)
