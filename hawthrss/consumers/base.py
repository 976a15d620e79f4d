"""
Source consumer shared by every kind of content source.

A consumer fetches one feed over HTTP, parses it into Items, applies the
configured title filters and finally the source's content transform. The
behavior that differs between sources (URL construction and content
rewriting) is injected through a SourceVariant.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional

import requests
import feedparser  # type: ignore

from hawthrss.errors import ConfigurationError, FetchError, ParseError
from hawthrss.filters import apply_filters, build_filter_list
from hawthrss.models import FetchState, Item, SourceKind

logger = logging.getLogger(__name__)

USER_AGENT = "HawthRSS/1.0"
DEFAULT_TIMEOUT = 10

# Options every consumer understands; variants add their own.
COMMON_OPTIONS = frozenset({"url", "only", "except", "title"})

UrlResolver = Callable[[Mapping[str, Any]], str]
Transform = Callable[[Item, Mapping[str, Any]], None]
OptionValidator = Callable[[Mapping[str, Any]], None]


@dataclass(frozen=True)
class SourceVariant:
    """The per-source behavior plugged into a SourceConsumer."""

    kind: SourceKind
    resolve_url: UrlResolver
    transform: Optional[Transform] = None
    validate: Optional[OptionValidator] = None
    options: frozenset = frozenset()


def _struct_to_datetime(value) -> datetime:
    return datetime(*value[:6], tzinfo=timezone.utc)


def _first_url(entry, key: str) -> Optional[str]:
    if key not in entry:
        return None
    media = entry[key]
    if not media or "url" not in media[0]:
        return None
    return media[0]["url"]


class SourceConsumer:
    """Fetches, filters and transforms the items of a single source."""

    def __init__(
        self,
        variant: SourceVariant,
        options: Optional[Mapping[str, Any]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        options = dict(options or {})
        unknown = set(options) - COMMON_OPTIONS - variant.options
        if unknown:
            raise ConfigurationError(
                f"Unknown options for {variant.kind.value} source: "
                f"{', '.join(sorted(unknown))}"
            )

        self.variant = variant
        self.options: Mapping[str, Any] = MappingProxyType(options)
        self.timeout = timeout
        if variant.validate:
            variant.validate(self.options)
        self.url = variant.resolve_url(self.options)
        self.only = build_filter_list(self.options.get("only"))
        self.except_ = build_filter_list(self.options.get("except"))

        self.title: Optional[str] = self.options.get("title")
        self.items: Optional[List[Item]] = None
        self.state = FetchState.UNFETCHED
        self._lock = threading.Lock()

    @property
    def kind(self) -> SourceKind:
        return self.variant.kind

    @property
    def source_id(self) -> str:
        """Stable identity derived from the source kind and resolved URL."""
        digest = hashlib.md5(self.url.encode("utf-8")).hexdigest()
        return f"{self.kind.value}-{digest[:12]}"

    @property
    def fetched(self) -> bool:
        return self.state is FetchState.FETCHED

    def __repr__(self) -> str:
        return f"<SourceConsumer {self.source_id} {self.url} {self.state.value}>"

    def _mark_fetched(self) -> None:
        if self.state is not FetchState.UNFETCHED:
            raise RuntimeError(f"{self.source_id} has already been fetched")
        self.state = FetchState.FETCHED

    def fetch_raw(self) -> bytes:
        """Retrieves the raw feed bytes."""
        try:
            resp = requests.get(
                self.url, timeout=self.timeout, headers={"User-Agent": USER_AGENT}
            )
            resp.raise_for_status()
        except requests.RequestException as req_err:
            logger.error("Network error fetching %s: %s", self.source_id, req_err)
            raise FetchError(f"Failed to fetch {self.url}: {req_err}") from req_err
        return resp.content

    def _entry_to_item(self, entry) -> Item:
        missing = [key for key in ("title", "link") if not entry.get(key)]
        if missing:
            raise ParseError(
                f"Entry in {self.url} is missing {', '.join(missing)}"
            )

        if entry.get("published_parsed"):
            updated_at = _struct_to_datetime(entry["published_parsed"])
        elif entry.get("updated_parsed"):
            updated_at = _struct_to_datetime(entry["updated_parsed"])
        else:
            raise ParseError(
                f"Entry {entry.get('id') or entry['link']} in {self.url} has no date"
            )

        if entry.get("content"):
            content = entry["content"][0].get("value", "")
        else:
            content = entry.get("summary", "")

        return Item(
            id=entry.get("id") or entry["link"],
            title=entry["title"],
            url=entry["link"],
            updated_at=updated_at,
            content=content or "",
            media_url=_first_url(entry, "media_content"),
            thumbnail_url=_first_url(entry, "media_thumbnail"),
            consumer=self,
        )

    def parse_to_items(self, raw: bytes) -> List[Item]:
        """Parses raw feed bytes into Items and records the feed title."""
        feed = feedparser.parse(raw, sanitize_html=False, resolve_relative_uris=False)
        # An empty version means feedparser found neither RSS nor Atom,
        # e.g. an HTML error page served with a 200 status.
        if not feed.get("version"):
            err = feed.get("bozo_exception") or "not an RSS or Atom document"
            logger.error("Error parsing %s: %s", self.source_id, err)
            raise ParseError(f"Malformed feed at {self.url}: {err}")

        if not self.options.get("title"):
            self.title = feed.feed.get("title") or self.url
        return [self._entry_to_item(entry) for entry in feed.entries]

    def filter(self, items: List[Item]) -> List[Item]:
        return apply_filters(items, self.only, self.except_)

    def transform(self, items: List[Item]) -> None:
        if self.variant.transform is None:
            return
        for item in items:
            self.variant.transform(item, self.options)

    def fetch(self) -> None:
        """Runs fetch -> filter -> transform once. Later calls do nothing."""
        with self._lock:
            if self.fetched:
                logger.debug("%s already fetched, skipping.", self.source_id)
                return

            raw = self.fetch_raw()
            parsed = self.parse_to_items(raw)
            items = self.filter(parsed)
            self.transform(items)

            self.items = items
            self._mark_fetched()
        logger.info(
            "Fetched %s (%s): %d entries -> %d kept.",
            self.title,
            self.source_id,
            len(parsed),
            len(items),
        )
