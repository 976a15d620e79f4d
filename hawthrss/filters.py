"""
Title filters for feed items.

A filter spec is resolved once, when a consumer is configured, into either a
SubstringFilter or a PatternFilter. Items are then kept or dropped by
matching their titles against the resolved specs.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional, Pattern, Sequence, Tuple, Union

from hawthrss.errors import ConfigurationError
from hawthrss.models import Item


@dataclass(frozen=True)
class SubstringFilter:
    """Case-insensitive containment match against the title."""

    text: str

    def matches(self, title: str) -> bool:
        return self.text.casefold() in title.casefold()


@dataclass(frozen=True)
class PatternFilter:
    """Regular expression search against the title."""

    pattern: Pattern[str]

    def matches(self, title: str) -> bool:
        return self.pattern.search(title) is not None


FilterSpec = Union[SubstringFilter, PatternFilter]


def build_filter_spec(value: Any) -> FilterSpec:
    """
    Resolves a configured filter value into a FilterSpec.

    Accepted shapes are a plain string, a compiled regular expression, or a
    mapping of the form {"pattern": "...", "ignore_case": bool}.
    """
    if isinstance(value, str):
        return SubstringFilter(value)
    if isinstance(value, re.Pattern):
        return PatternFilter(value)
    if isinstance(value, dict) and "pattern" in value:
        unknown = set(value) - {"pattern", "ignore_case"}
        if unknown or not isinstance(value["pattern"], str):
            raise ConfigurationError(f"Unsupported filter spec: {value!r}")
        flags = re.IGNORECASE if value.get("ignore_case") else 0
        try:
            return PatternFilter(re.compile(value["pattern"], flags))
        except re.error as e:
            raise ConfigurationError(
                f"Invalid filter pattern {value['pattern']!r}: {e}"
            ) from e
    raise ConfigurationError(f"Unsupported filter spec: {value!r}")


def build_filter_list(value: Any) -> Optional[Tuple[FilterSpec, ...]]:
    """Resolves an `only`/`except` option: absent, one spec, or a list of specs."""
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(build_filter_spec(v) for v in value)
    return (build_filter_spec(value),)


def matches_any(item: Item, specs: Sequence[FilterSpec]) -> bool:
    """True if the item's title matches at least one spec."""
    return any(spec.matches(item["title"]) for spec in specs)


def apply_filters(
    items: List[Item],
    only: Optional[Sequence[FilterSpec]] = None,
    except_: Optional[Sequence[FilterSpec]] = None,
) -> List[Item]:
    """Applies the inclusion filter, then the exclusion filter."""
    selected = items
    if only is not None:
        selected = [item for item in selected if matches_any(item, only)]
    if except_ is not None:
        selected = [item for item in selected if not matches_any(item, except_)]
    return list(selected)
