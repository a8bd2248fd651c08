"""
privaccess_sdk.paging

Lazy, strictly ordered page streams over paginated list endpoints.

Responsibilities:
- Fetch one page per request and hand it to the consumer before fetching the next.
- Extract items from the platform's envelope shapes and validate them into models.
- Follow `nextLink` URLs or `next_cursor` tokens until the listing ends.
- Record (rather than raise) the reason a listing ended early.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar
from urllib.parse import parse_qs, urlparse

from pydantic import ValidationError

from privaccess_sdk.clients.json_case import snake_keys
from privaccess_sdk.clients.rest import RestClient
from privaccess_sdk.errors import PageStreamError, TransportError
from privaccess_sdk.observability.logging import get_logger

T = TypeVar("T")

Cursor = Callable[[Mapping[str, Any]], dict[str, Any] | None]
Remap = Callable[[dict[str, Any]], dict[str, Any]]

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    items: list[T]
    index: int

    def __len__(self) -> int:
        return len(self.items)


def next_link_cursor(payload: Mapping[str, Any]) -> dict[str, Any] | None:
    # The continuation URL's query string becomes the whole next query (first value per key).
    link = payload.get("nextLink") or payload.get("next_link")
    if not isinstance(link, str) or not link:
        return None
    parsed = parse_qs(urlparse(link).query, keep_blank_values=True)
    return {k: v[0] for k, v in parsed.items() if v}


def next_token_cursor(
    *,
    token_key: str = "next_cursor",
    param: str = "cursor",
    extra: Mapping[str, Any] | None = None,
) -> Cursor:
    """
    Cursor strategy for `{"items": [...], "next_cursor": "..."}` envelopes.

    `extra` parameters (for example `limit`) are re-sent with every continuation.
    """

    def cursor(payload: Mapping[str, Any]) -> dict[str, Any] | None:
        token = payload.get(token_key)
        if not isinstance(token, str) or not token:
            return None
        return {**(extra or {}), param: token}

    return cursor


def remap_keys(mapping: Mapping[str, str]) -> Remap:
    """Copy `source` to `target` on every item that carries `source`."""

    def remap(item: dict[str, Any]) -> dict[str, Any]:
        for source, target in mapping.items():
            if source in item:
                item[target] = item[source]
        return item

    return remap


def _lookup(payload: Mapping[str, Any], path: str) -> Any:
    node: Any = payload
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def extract_items(payload: Any, items_keys: Sequence[str]) -> list[Any] | None:
    # First alternative that resolves to a list wins; dotted keys walk nested envelopes.
    if not isinstance(payload, Mapping):
        return None
    for key in items_keys:
        found = _lookup(payload, key)
        if isinstance(found, list):
            return found
    return None


class PageStream(Generic[T]):
    """
    Single-use async iterator of `Page[T]`.

    Iteration never raises for transport or decode failures; the stream simply ends.
    Afterwards `error` holds the `PageStreamError` describing an early end (or None),
    and `exhausted` is True only when the last page was reached normally.
    With `raise_on_error=True` the recorded error is raised once the pages run out.
    """

    def __init__(
        self,
        fetch: Callable[[PageStream[T]], AsyncIterator[Page[T]]],
        *,
        name: str,
        raise_on_error: bool = False,
    ) -> None:
        self.name = name
        self.error: PageStreamError | None = None
        self.exhausted = False
        self.pages_fetched = 0
        self._raise_on_error = raise_on_error
        self._gen = fetch(self)

    def __aiter__(self) -> AsyncIterator[Page[T]]:
        return self

    async def __anext__(self) -> Page[T]:
        try:
            return await self._gen.__anext__()
        except StopAsyncIteration:
            if self._raise_on_error and self.error is not None:
                raise self.error from None
            raise

    async def items(self) -> AsyncIterator[T]:
        async for page in self:
            for item in page.items:
                yield item

    async def aclose(self) -> None:
        await self._gen.aclose()

    async def __aenter__(self) -> PageStream[T]:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    def _fail(self, page_index: int, reason: str) -> None:
        self.error = PageStreamError(self.name, page_index, reason)
        log.error("page_stream_aborted", stream=self.name, page_index=page_index, reason=reason)


def stream_pages(
    rest: RestClient,
    path: str,
    *,
    decode_item: Callable[[dict[str, Any]], T],
    query: Mapping[str, Any] | None = None,
    items_keys: Sequence[str] = ("value",),
    remap: Remap | None = None,
    cursor: Cursor | None = next_link_cursor,
    name: str | None = None,
    raise_on_error: bool = False,
) -> PageStream[T]:
    """
    Build a lazy stream over `path`. No request is made until the first page is awaited.
    `cursor=None` fetches exactly one page.
    """

    async def fetch(stream: PageStream[T]) -> AsyncIterator[Page[T]]:
        current: dict[str, Any] = dict(query or {})
        index = 0
        while True:
            try:
                response = await rest.get(path, params=current or None)
            except TransportError as e:
                stream._fail(index, str(e))
                return
            if response.status_code != 200:
                stream._fail(index, f"unexpected status [{response.status_code}] - [{response.text}]")
                return
            try:
                payload = response.json()
            except ValueError as e:
                stream._fail(index, f"failed to decode response: {e}")
                return
            raw_items = extract_items(payload, items_keys)
            if raw_items is None:
                stream._fail(index, "unexpected result, no items in response")
                return
            try:
                items: list[T] = []
                for raw in raw_items:
                    item = snake_keys(raw)
                    if remap is not None and isinstance(item, dict):
                        item = remap(item)
                    items.append(decode_item(item))
            except (ValidationError, TypeError, ValueError) as e:
                stream._fail(index, f"failed to validate items: {e}")
                return

            stream.pages_fetched += 1
            # Suspends until the consumer asks for the next page.
            yield Page(items=items, index=index)

            next_query = cursor(payload) if cursor is not None else None
            if next_query is None:
                stream.exhausted = True
                return
            current = next_query
            index += 1

    return PageStream(fetch, name=name or path, raise_on_error=raise_on_error)


async def collect(stream: PageStream[T]) -> list[T]:
    return [item async for item in stream.items()]


# --- Module Notes -----------------------------------------------------------
# There is no background producer: an abandoned stream holds no pending request,
# and `aclose()` releases the generator immediately.
