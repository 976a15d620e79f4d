"""
Data models for the HawthRSS application.
"""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, Optional, TypedDict

if TYPE_CHECKING:
    from hawthrss.consumers.base import SourceConsumer


class SourceKind(str, enum.Enum):
    """Kinds of content source a consumer can be built for."""

    GENERIC = "generic"
    SMBC = "smbc"
    XKCD = "xkcd"
    YOUTUBE = "youtube"


class FetchState(enum.Enum):
    """A consumer is fetched at most once: UNFETCHED -> FETCHED."""

    UNFETCHED = "unfetched"
    FETCHED = "fetched"


class Item(TypedDict):
    """Type definition for a feed item."""

    id: str
    title: str
    url: str
    updated_at: datetime
    content: str
    media_url: Optional[str]
    thumbnail_url: Optional[str]
    consumer: "SourceConsumer"  # Owning consumer, lookup only
