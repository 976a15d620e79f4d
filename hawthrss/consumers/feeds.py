"""
Plain feed sources: arbitrary Atom/RSS feeds and web comics.
"""

import re
from typing import Any, Mapping

from hawthrss.consumers.base import SourceVariant
from hawthrss.errors import ConfigurationError
from hawthrss.models import Item, SourceKind

XKCD_URL = "https://xkcd.com/atom.xml"
SMBC_URL = "https://www.smbc-comics.com/rss.php"

_BR = r"<br\s*/?>"
SMBC_BONUS_PANEL = re.compile(
    _BR + _BR + r"""<a href="[^">]*">Click here to go see the bonus panel!</a>""",
    re.IGNORECASE,
)
SMBC_NEW_COMIC = re.compile(_BR + _BR + r"<a href=[^>]*>New comic.*", re.IGNORECASE)


def resolve_feed_url(options: Mapping[str, Any]) -> str:
    url = options.get("url")
    if not url or not isinstance(url, str):
        raise ConfigurationError("option 'url' required")
    return url


def _default_url(url: str):
    def resolve(options: Mapping[str, Any]) -> str:
        return options.get("url") or url

    return resolve


def strip_smbc_extras(item: Item, options: Mapping[str, Any]) -> None:
    """Removes the bonus panel link and the trailing "New comic" promo."""
    content = SMBC_BONUS_PANEL.sub("", item["content"])
    item["content"] = SMBC_NEW_COMIC.sub("", content)


GENERIC = SourceVariant(kind=SourceKind.GENERIC, resolve_url=resolve_feed_url)

XKCD = SourceVariant(kind=SourceKind.XKCD, resolve_url=_default_url(XKCD_URL))

SMBC = SourceVariant(
    kind=SourceKind.SMBC,
    resolve_url=_default_url(SMBC_URL),
    transform=strip_smbc_extras,
)
