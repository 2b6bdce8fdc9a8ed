"""HTTP Fetch Tool for toolhub.

This module provides a tool for fetching URLs over HTTP(S).

Public Interface:
    - create_http_fetch_tool(): Create the http_fetch tool definition
    - http_fetch_handler(): Handle http_fetch tool calls

Examples:
    >>> params = ArgumentSet({"url": "https://example.com", "method": "GET"})
    >>> print(await http_fetch_handler(params, ToolContext()))
    HTTP 200 OK
    Content-Type: text/html; charset=UTF-8
    <BLANKLINE>
    <!doctype html>...
"""

import asyncio
import logging
from functools import partial
from typing import Any, Dict, Final, Optional
from urllib.parse import urlparse

import aiohttp
import backoff

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.types import ArgumentSet, Tool, ToolParameter

logger = logging.getLogger(__name__)

# Constants
METHODS: Final = ["GET", "HEAD", "POST", "PUT", "DELETE"]
DEFAULT_TIMEOUT: Final = 15.0
DEFAULT_MAX_BYTES: Final = 100_000
DEFAULT_MAX_TRIES: Final = 3
RETRY_EXCEPTIONS: Final = (aiohttp.ClientConnectionError, asyncio.TimeoutError)
RETRY_FACTOR = 0.5


class HttpFetchError(ToolError):
    """Raised when there is an error fetching a URL."""
    pass


def validate_url(url: str) -> str:
    """Check that a URL is an absolute http(s) URL.

    Raises:
        HttpFetchError: If the URL is unusable
    """
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise HttpFetchError(f"Only http and https URLs are supported: {url}")
    if not parsed.netloc:
        raise HttpFetchError(f"URL has no host: {url}")
    return url


async def _read_body(response: aiohttp.ClientResponse, max_bytes: int) -> str:
    data = await response.content.read(max_bytes + 1)
    truncated = len(data) > max_bytes
    text = data[:max_bytes].decode(response.charset or "utf-8", errors="replace")
    if truncated:
        text += f"\n... [truncated after {max_bytes} bytes]"
    return text


async def _request_once(
    session: aiohttp.ClientSession,
    method: str,
    url: str,
    body: Optional[str],
    headers: Dict[str, str],
    max_bytes: int,
) -> str:
    async with session.request(method, url, data=body, headers=headers) as response:
        if response.status >= 400:
            snippet = (await _read_body(response, 500)).strip()
            raise HttpFetchError(f"HTTP {response.status} {response.reason or ''} from {url}: {snippet}".strip())

        lines = [f"HTTP {response.status} {response.reason or ''}".rstrip()]
        content_type = response.headers.get("Content-Type")
        if content_type:
            lines.append(f"Content-Type: {content_type}")
        text = "" if method == "HEAD" else await _read_body(response, max_bytes)
        return "\n".join(lines) + "\n\n" + text


def _log_retry(details: Dict[str, Any]) -> None:
    logger.warning(
        "Retrying HTTP request",
        extra={"tries": details["tries"], "wait": details.get("wait")},
    )


async def fetch(
    url: str,
    method: str = "GET",
    body: Optional[str] = None,
    content_type: Optional[str] = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_tries: int = DEFAULT_MAX_TRIES,
) -> str:
    """Perform an HTTP request and format the response.

    Connection errors and timeouts are retried with exponential backoff.

    Raises:
        HttpFetchError: On an error status or when all attempts fail
    """
    url = validate_url(url)
    headers = {"Content-Type": content_type} if content_type else {}

    retrying = backoff.on_exception(
        backoff.expo,
        RETRY_EXCEPTIONS,
        max_tries=max_tries,
        factor=RETRY_FACTOR,
        on_backoff=_log_retry,
    )(_request_once)

    client_timeout = aiohttp.ClientTimeout(total=timeout)
    try:
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            return await retrying(session, method, url, body, headers, max_bytes)
    except asyncio.TimeoutError:
        raise HttpFetchError(f"Request to {url} timed out after {timeout} seconds")
    except aiohttp.ClientError as e:
        raise HttpFetchError(f"Error connecting to {url}: {str(e)}")


async def http_fetch_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_tries: int = DEFAULT_MAX_TRIES,
) -> str:
    """Handle http_fetch tool execution.

    Args:
        args: Validated arguments containing:
            - url: URL to fetch
            - method: HTTP method
            - body: Optional request body
            - content_type: Optional Content-Type of the body
        context: Call context

    Returns:
        Status line, content type and (possibly truncated) body

    Raises:
        HttpFetchError: If the request fails
    """
    method = args["method"]
    body = args.get("body")
    if body is not None and method in ("GET", "HEAD"):
        raise HttpFetchError(f"A request body is not allowed with {method}")

    return await context.run(fetch(
        args["url"],
        method,
        body,
        args.get("content_type"),
        timeout=timeout,
        max_bytes=max_bytes,
        max_tries=max_tries,
    ))


def create_http_fetch_tool(
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    max_tries: int = DEFAULT_MAX_TRIES,
) -> Tool:
    """Create the http_fetch tool definition.

    Args:
        timeout: Total request timeout in seconds
        max_bytes: Maximum body bytes returned
        max_tries: Attempts for transient connection errors
    """
    return Tool(
        name="http_fetch",
        description="Fetch a URL over HTTP(S) and return the response",
        parameters={
            "url": ToolParameter(
                type="string",
                description="Absolute http or https URL",
                required=True
            ),
            "method": ToolParameter(
                type="string",
                description="HTTP method",
                default="GET",
                enum=METHODS
            ),
            "body": ToolParameter(
                type="string",
                description="Request body (POST, PUT and DELETE only)"
            ),
            "content_type": ToolParameter(
                type="string",
                description="Content-Type of the request body"
            )
        },
        handler=partial(http_fetch_handler, timeout=timeout, max_bytes=max_bytes, max_tries=max_tries)
    )
