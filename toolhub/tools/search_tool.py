"""Web Search Tool for toolhub.

This module provides a web search tool backed by the DuckDuckGo Instant
Answer API, which needs no API key.

Public Interface:
    - create_web_search_tool(): Create the web_search tool definition
    - web_search_handler(): Handle web_search tool calls
    - parse_search_results(): Extract results from an API response

Examples:
    >>> params = ArgumentSet({"query": "Python asyncio", "limit": 3.0})
    >>> print(await web_search_handler(params, ToolContext()))
    Search results for 'Python asyncio':
    1. asyncio - Asynchronous I/O
       https://docs.python.org/3/library/asyncio.html
    ...
"""

import asyncio
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Final, List

import aiohttp

from toolhub.core.context import ToolContext
from toolhub.core.errors import ToolError
from toolhub.types import ArgumentSet, Tool, ToolParameter

# Constants
BASE_URL: Final[str] = "https://api.duckduckgo.com/"
DEFAULT_LIMIT: Final[int] = 10
MAX_LIMIT: Final[int] = 20
DEFAULT_TIMEOUT: Final[float] = 10.0


@dataclass(frozen=True)
class SearchResult:
    """A single search hit.

    Attributes:
        title: Result title or snippet
        url: Link to the result
    """
    title: str
    url: str


class SearchError(ToolError):
    """Raised when there is an error performing a web search."""
    pass


def _topic_result(topic: Dict[str, Any]) -> List[SearchResult]:
    # Category groups nest their own topics
    if "Topics" in topic:
        results = []
        for sub in topic.get("Topics") or []:
            results.extend(_topic_result(sub))
        return results
    text = (topic.get("Text") or "").strip()
    url = (topic.get("FirstURL") or "").strip()
    if not text or not url:
        return []
    return [SearchResult(title=text, url=url)]


def parse_search_results(data: Dict[str, Any]) -> List[SearchResult]:
    """Extract search results from an Instant Answer API response.

    The abstract (if any) comes first, then direct results, then related
    topics. Duplicate URLs are dropped.

    Args:
        data: Decoded JSON response

    Returns:
        Results in display order
    """
    results: List[SearchResult] = []
    abstract = (data.get("AbstractText") or "").strip()
    abstract_url = (data.get("AbstractURL") or "").strip()
    if abstract and abstract_url:
        heading = (data.get("Heading") or "").strip()
        title = f"{heading} - {abstract}" if heading else abstract
        results.append(SearchResult(title=title, url=abstract_url))

    for item in (data.get("Results") or []) + (data.get("RelatedTopics") or []):
        if isinstance(item, dict):
            results.extend(_topic_result(item))

    seen = set()
    unique = []
    for result in results:
        if result.url in seen:
            continue
        seen.add(result.url)
        unique.append(result)
    return unique


def format_search_results(query: str, results: List[SearchResult]) -> str:
    """Format search results into a numbered list."""
    if not results:
        return f"No results found for '{query}'"
    lines = [f"Search results for '{query}':"]
    for i, result in enumerate(results, 1):
        lines.append(f"{i}. {result.title}")
        lines.append(f"   {result.url}")
    return "\n".join(lines)


async def _search(query: str, base_url: str, timeout: float) -> Dict[str, Any]:
    params = {
        "q": query,
        "format": "json",
        "no_html": "1",
        "skip_disambig": "1",
    }
    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        async with session.get(base_url, params=params) as response:
            if response.status != 200:
                raise SearchError(
                    f"Search API error: {response.status} - {await response.text()}"
                )
            # The API answers with a javascript content type
            return await response.json(content_type=None)


async def web_search_handler(
    args: ArgumentSet,
    context: ToolContext,
    *,
    base_url: str = BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> str:
    """Handle web_search tool execution.

    Args:
        args: Validated arguments containing:
            - query: Search terms
            - limit: Maximum number of results (clamped to 1..20)
        context: Call context

    Returns:
        Numbered search results

    Raises:
        SearchError: If the search fails
    """
    query = args["query"].strip()
    if not query:
        raise SearchError("Query cannot be empty")
    limit = max(1, min(MAX_LIMIT, int(args["limit"])))

    try:
        data = await context.run(_search(query, base_url, timeout))
    except asyncio.TimeoutError:
        raise SearchError(f"Search timed out after {timeout} seconds")
    except aiohttp.ClientError as e:
        raise SearchError(f"Error connecting to search API: {str(e)}")
    except ValueError as e:
        raise SearchError(f"Invalid response from search API: {str(e)}")

    if not isinstance(data, dict):
        raise SearchError("Invalid response from search API")
    return format_search_results(query, parse_search_results(data)[:limit])


def create_web_search_tool(base_url: str = BASE_URL, timeout: float = DEFAULT_TIMEOUT) -> Tool:
    """Create the web_search tool definition.

    Args:
        base_url: Instant Answer API endpoint
        timeout: Request timeout in seconds
    """
    return Tool(
        name="web_search",
        description="Search the web and return matching titles and links",
        parameters={
            "query": ToolParameter(
                type="string",
                description="Search terms",
                required=True
            ),
            "limit": ToolParameter(
                type="number",
                description=f"Maximum number of results (1-{MAX_LIMIT})",
                default=DEFAULT_LIMIT
            )
        },
        handler=partial(web_search_handler, base_url=base_url, timeout=timeout)
    )
