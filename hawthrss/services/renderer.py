"""
HTML renderer module for the aggregated feed.

This module provides the HtmlRenderer class which handles:
- Rendering one article block per item
- Wrapping the articles in a standalone HTML page
- Writing the page to disk
"""

import html
import logging
from typing import Sequence

from hawthrss.models import Item

logger = logging.getLogger(__name__)


class HtmlRenderer:
    """Renders the ordered items as a static HTML page."""

    def __init__(self, title: str = "HawthRSS", stylesheet: str = "assets/style.css"):
        self.title = title
        self.stylesheet = stylesheet

    def _render_item(self, item: Item) -> str:
        """Renders a single article."""
        source = item["consumer"].title or ""
        return f"""
    <article>
      <span class="source">{html.escape(source)}</span>
      <h1><a href="{html.escape(item['url'])}">{html.escape(item['title'])}</a></h1>
      <time datetime="{item['updated_at'].isoformat()}">{item['updated_at']:%Y-%m-%d %H:%M}</time>
      <div class="body">
        {item['content']}
      </div>
    </article>
    <hr />"""

    def render(self, items: Sequence[Item]) -> str:
        """Generates the page for items already in display order."""
        articles = "".join(self._render_item(item) for item in items)
        return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="UTF-8" />
    <title>{html.escape(self.title)}</title>
    <meta name="viewport" content="width=device-width" />
    <link rel="stylesheet" href="{html.escape(self.stylesheet)}" />
  </head>
  <body>{articles}
  </body>
</html>
"""

    def write(self, items: Sequence[Item], path: str) -> None:
        """Renders the page and writes it to path."""
        document = self.render(items)
        with open(path, "w", encoding="utf-8") as f:
            f.write(document)
        logger.info("Wrote %d items to %s.", len(items), path)
