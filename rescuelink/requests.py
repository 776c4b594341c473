"""
Low-level HTTP request library for RescueLink API communication.
This module handles all HTTP requests with optional retry logic and proper error handling.
"""
import asyncio
import logging
import aiohttp

from rescuelink.const import REQUEST_TIMEOUT, REQUEST_ATTEMPTS


_LOGGER = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


class ApiResponseError(Exception):
    """Exception raised when the API returns an error response."""
    def __init__(self, status: int, error_json: dict | None = None):
        self.status = status
        self.error_json = error_json or {}
        super().__init__(self.message or f"Request failed with status code {status}")

    @property
    def message(self) -> str | None:
        """Human-readable message supplied by the server, if any."""
        message = self.error_json.get("message") or self.error_json.get("error")
        if isinstance(message, str) and message:
            return message
        return None


class UnauthorizedError(ApiResponseError):
    """Exception raised on HTTP 401; the session token is no longer valid."""


async def check_api_availability(base_url: str, timeout: int = 15) -> bool:
    """
    Check if the RescueLink API is reachable by sending a HEAD request.

    Args:
        base_url: API base URL
        timeout: Timeout in seconds for the HEAD request

    Returns:
        True if the API answered with a status below 500, False otherwise
    """
    try:
        timeout_config = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=timeout_config) as session:
            async with session.head(base_url) as response:
                if response.status >= 500:
                    _LOGGER.warning("API URL is not reachable (status %s)", response.status)
                    return False
                return True
    except (asyncio.TimeoutError, TimeoutError):
        _LOGGER.warning("Timeout while checking API URL")
        return False
    except aiohttp.ClientError as e:
        _LOGGER.error("Error while checking API availability: %s", e)
        return False


async def make_request(
    method: str,
    url: str,
    headers: dict,
    payload: dict | list | None = None,
    params: dict | None = None,
    timeout: int = REQUEST_TIMEOUT,
    max_attempts: int = REQUEST_ATTEMPTS,
):
    """
    Make an HTTP request, retrying on timeout up to max_attempts times.

    Args:
        method: HTTP method (GET, POST, PUT, PATCH, DELETE)
        url: Target URL for the request
        headers: HTTP headers dictionary
        payload: JSON payload (optional)
        params: URL query parameters (optional)
        timeout: Base timeout in seconds (multiplied by attempt number for each retry)
        max_attempts: Maximum number of attempts; 1 disables retries

    Returns:
        Parsed JSON response, or None for an empty body

    Raises:
        asyncio.TimeoutError: If all attempts time out
        ApiResponseError: If the API answers with an error status
        ValueError: If the response has an unexpected content type
    """
    method = method.upper()
    if method not in SUPPORTED_METHODS:
        raise ValueError(f"Unsupported HTTP method: {method}")

    for attempt in range(max_attempts):
        try:
            # Timeout grows with each attempt
            timeout_config = aiohttp.ClientTimeout(total=timeout * (attempt + 1))
            async with aiohttp.ClientSession(timeout=timeout_config) as session:
                async with session.request(
                    method, url, headers=headers, json=payload, params=params
                ) as response:
                    return await _process_response(response, url)

        except (asyncio.TimeoutError, TimeoutError):
            if attempt < max_attempts - 1:
                _LOGGER.debug("Timeout on %s %s, retrying (attempt %s)", method, url, attempt + 1)
                continue
            _LOGGER.warning(
                "Timeout on %s request to %s after %s attempts",
                method, url, max_attempts
            )
            raise

    return None


async def _process_response(response, url: str):
    """
    Process HTTP response and extract JSON data.

    Args:
        response: aiohttp response object
        url: Request URL (for logging)

    Returns:
        Parsed JSON response, or None for an empty body

    Raises:
        UnauthorizedError: On HTTP 401
        ApiResponseError: For other error statuses
        ValueError: If a response has an unexpected content type
    """
    content_type = response.headers.get('Content-Type', '')

    # Handle successful response
    if 200 <= response.status < 300:
        if response.status == 204:
            return None
        if 'application/json' in content_type:
            return await response.json()
        text = await response.text()
        if not text:
            return None
        _LOGGER.warning(
            "Unexpected content type in successful response: %s (status %s) from %s",
            content_type, response.status, url
        )
        raise ValueError(f"Expected JSON but got {content_type}: {text[:200]}")

    error_cls = UnauthorizedError if response.status == 401 else ApiResponseError

    # Handle error responses
    if 'application/json' in content_type:
        try:
            error_json = await response.json()
        except (aiohttp.ContentTypeError, ValueError) as e:
            _LOGGER.error(
                "Failed to parse error response as JSON from %s: %s (status %s, content-type: %s)",
                url, e, response.status, content_type
            )
            raise error_cls(response.status) from e
        raise error_cls(response.status, error_json if isinstance(error_json, dict) else None)

    # Non-JSON error response (e.g., HTML error page)
    text = await response.text()
    _LOGGER.warning(
        "Received non-JSON error response from %s: status %s, content-type: %s, body preview: %s",
        url, response.status, content_type, text[:200]
    )
    raise error_cls(response.status)
