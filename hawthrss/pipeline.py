"""
Runs the source consumers and merges their items into a single feed.
"""

import concurrent.futures
import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from hawthrss.consumers.base import SourceConsumer
from hawthrss.models import FetchState, Item

logger = logging.getLogger(__name__)


def _unique(consumers: Iterable[SourceConsumer]) -> List[SourceConsumer]:
    """Drops repeated consumer objects, keeping first-seen order."""
    return list({id(consumer): consumer for consumer in consumers}.values())


def run_consumers(
    consumers: Sequence[SourceConsumer], max_workers: Optional[int] = None
) -> None:
    """
    Fetches every unfetched consumer, one thread per consumer.

    The first failure cancels the fetches that have not started yet and is
    re-raised; nothing is aggregated from a failed run.
    """
    unique = _unique(consumers)
    pending = [c for c in unique if c.state is FetchState.UNFETCHED]
    if len(pending) < len(unique):
        logger.debug("Skipping %d already fetched sources.", len(unique) - len(pending))
    if not pending:
        return

    logger.info("Fetching %d sources...", len(pending))
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_consumer = {
            executor.submit(consumer.fetch): consumer for consumer in pending
        }
        for future in concurrent.futures.as_completed(future_to_consumer):
            try:
                future.result()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                consumer = future_to_consumer[future]
                logger.error("%s generated an exception: %s", consumer.source_id, exc)
                for other in future_to_consumer:
                    other.cancel()
                raise


def aggregate(consumers: Iterable[SourceConsumer]) -> Tuple[Item, ...]:
    """Merges all consumers' items, newest first; ties keep consumer order."""
    items: List[Item] = []
    for consumer in _unique(consumers):
        if consumer.items is None:
            raise RuntimeError(f"{consumer.source_id} has not been fetched")
        items.extend(consumer.items)

    # sorted() is stable with reverse=True, unlike sort-then-reverse.
    return tuple(sorted(items, key=lambda item: item["updated_at"], reverse=True))


def build_feed(
    consumers: Sequence[SourceConsumer], max_workers: Optional[int] = None
) -> Tuple[Item, ...]:
    run_consumers(consumers, max_workers=max_workers)
    items = aggregate(consumers)
    logger.info("Aggregated %d items from %d sources.", len(items), len(consumers))
    return items
