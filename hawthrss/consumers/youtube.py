"""
YouTube channel source.

A channel is identified by exactly one of `channel_id` or `user`. The
item content is replaced by a rendering of the video chosen with the
`render` option; new renderings only need an entry in RENDERERS.
"""

import html
import re
from typing import Any, Callable, Dict, Mapping
from urllib.parse import urlencode

from hawthrss.consumers.base import SourceVariant
from hawthrss.errors import ConfigurationError
from hawthrss.models import Item, SourceKind

FEED_URL = "https://www.youtube.com/feeds/videos.xml"
DEFAULT_RENDER = "thumbnail"

# https://www.youtube.com/v/<id>?version=3 or https://www.youtube.com/watch?v=<id>
WATCH_URL = re.compile(r"/(?:v/|watch\?v=)")


def resolve_channel_url(options: Mapping[str, Any]) -> str:
    channel_id = options.get("channel_id")
    user = options.get("user")
    if channel_id and user:
        raise ConfigurationError("options 'channel_id' and 'user' are exclusive")
    if channel_id:
        return f"{FEED_URL}?{urlencode({'channel_id': channel_id})}"
    if user:
        return f"{FEED_URL}?{urlencode({'user': user})}"
    raise ConfigurationError("option 'channel_id' or 'user' required")


def embed_url(media_url: str) -> str:
    """Converts a watch-page URL into its embeddable player URL."""
    return WATCH_URL.sub("/embed/", media_url, count=1)


def _link(url: str, text: str) -> str:
    return f'<a href="{html.escape(url)}">{html.escape(text)}</a>'


def render_embed(item: Item) -> str:
    media_url = item["media_url"]
    if not media_url:
        return _link(item["url"], item["title"])
    return (
        f'<iframe width="560" height="315" src="{html.escape(embed_url(media_url))}" '
        'frameborder="0" allowfullscreen></iframe>'
        f"<p>{_link(media_url, media_url)}</p>"
    )


def render_thumbnail(item: Item) -> str:
    thumbnail_url = item["thumbnail_url"]
    if not thumbnail_url:
        return _link(item["url"], item["title"])
    return (
        f'<a href="{html.escape(item["url"])}">'
        f'<img src="{html.escape(thumbnail_url)}" alt="{html.escape(item["title"])}" />'
        "</a>"
    )


RENDERERS: Dict[str, Callable[[Item], str]] = {
    "embed": render_embed,
    "thumbnail": render_thumbnail,
}


def validate_options(options: Mapping[str, Any]) -> None:
    render = options.get("render", DEFAULT_RENDER)
    if render not in RENDERERS:
        raise ConfigurationError(
            f"Unknown render {render!r}, expected one of {', '.join(sorted(RENDERERS))}"
        )


def render_video(item: Item, options: Mapping[str, Any]) -> None:
    item["content"] = RENDERERS[options.get("render", DEFAULT_RENDER)](item)


YOUTUBE = SourceVariant(
    kind=SourceKind.YOUTUBE,
    resolve_url=resolve_channel_url,
    transform=render_video,
    validate=validate_options,
    options=frozenset({"channel_id", "user", "render"}),
)
