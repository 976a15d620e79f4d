"""
Builds source consumers from run configuration entries.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from hawthrss.consumers.base import DEFAULT_TIMEOUT, SourceConsumer, SourceVariant
from hawthrss.consumers.feeds import GENERIC, SMBC, XKCD
from hawthrss.consumers.youtube import YOUTUBE
from hawthrss.errors import ConfigurationError
from hawthrss.models import SourceKind

logger = logging.getLogger(__name__)

VARIANTS: Dict[SourceKind, SourceVariant] = {
    variant.kind: variant for variant in (GENERIC, SMBC, XKCD, YOUTUBE)
}


def create_consumer(
    kind: SourceKind, timeout: float = DEFAULT_TIMEOUT, **options: Any
) -> SourceConsumer:
    """Creates a consumer of the given kind, e.g. create_consumer(SourceKind.XKCD)."""
    return SourceConsumer(VARIANTS[kind], options, timeout=timeout)


def build_consumer(
    entry: Mapping[str, Any], timeout: float = DEFAULT_TIMEOUT
) -> SourceConsumer:
    """Builds a consumer from a config entry such as {"kind": "smbc"}."""
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Source entry must be an object, got {entry!r}")
    options = dict(entry)
    kind_name = options.pop("kind", SourceKind.GENERIC.value)
    try:
        kind = SourceKind(kind_name)
    except ValueError as e:
        raise ConfigurationError(f"Unknown source kind: {kind_name!r}") from e
    return SourceConsumer(VARIANTS[kind], options, timeout=timeout)


def build_consumers(
    entries: Iterable[Mapping[str, Any]], timeout: float = DEFAULT_TIMEOUT
) -> List[SourceConsumer]:
    consumers = [build_consumer(entry, timeout=timeout) for entry in entries]
    logger.info("Configured %d sources.", len(consumers))
    return consumers
