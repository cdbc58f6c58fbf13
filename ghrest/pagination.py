"""Walks paged list endpoints by following ``rel="next"`` continuation links."""

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import TypeVar

from ghrest.errors import MalformedResponse, raise_for_status
from ghrest.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100

_SEPARATOR = re.compile(r",\s*(?=<)")
_ENTRY = re.compile(r"^\s*<([^<>]*)>\s*;(.*)$")
_REL = re.compile(r'\brel\s*=\s*"?([^";]+)"?')


def parse_link_header(value: str | None) -> dict[str, str]:
    """Parse ``<url>; rel="name", ...`` into ``{name: url}``.

    Entries are separated by commas outside the angle brackets, so URLs may
    carry commas in their query. Malformed entries are skipped; the first URL
    seen for a rel wins.
    """
    links: dict[str, str] = {}
    if not value:
        return links
    for entry in _SEPARATOR.split(value):
        if not entry.strip():
            continue
        match = _ENTRY.match(entry)
        rel = _REL.search(match.group(2)) if match else None
        if match is None or rel is None:
            logger.debug("Ignoring malformed Link entry %r", entry)
            continue
        for name in rel.group(1).split():
            links.setdefault(name, match.group(1).strip())
    return links


def with_page_size(path: str, per_page: int = DEFAULT_PAGE_SIZE) -> str:
    """Put ``per_page`` first in the query string of ``path``."""
    base, sep, query = path.partition("?")
    return f"{base}?per_page={per_page}&{query}" if sep and query else f"{base}?per_page={per_page}"


def relative_to_origin(url: str, api_url: str) -> str:
    """Strip the API origin from an absolute URL, leaving path and query untouched.

    URLs on another origin come back unchanged.
    """
    origin = api_url.rstrip("/")
    if url.startswith(origin + "/"):
        return url[len(origin) :]
    return url


def _next_path(url: str, api_url: str, current: str) -> str:
    path = relative_to_origin(url, api_url)
    if not path.startswith("/"):
        raise MalformedResponse(f"GET {current}", f"next page link leaves the API origin {api_url}: {url}")
    return path


def paginate(
    transport: Transport,
    path: str,
    decode_page: Callable[[bytes], Iterable[T]],
    headers: Mapping[str, str] | None = None,
) -> list[T]:
    """Fetch ``path`` and every page linked after it, concatenated in fetch order.

    ``path`` is requested as given; callers add the page size. A failed page
    raises ApiError for the page that failed. A next link pointing outside the
    transport's API origin raises MalformedResponse and is never requested.
    """
    items: list[T] = []
    next_path: str | None = path
    pages = 0
    while next_path is not None:
        response = transport.get(next_path, headers or {})
        raise_for_status(response.status, response.body, "GET", next_path)
        items.extend(decode_page(response.body))
        pages += 1
        next_url = parse_link_header(response.header("Link")).get("next")
        next_path = _next_path(next_url, transport.api_url, next_path) if next_url else None
    logger.debug("Fetched %d item(s) from %s in %d page(s)", len(items), path, pages)
    return items
