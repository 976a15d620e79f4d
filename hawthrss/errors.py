"""
Error types for HawthRSS.

Every error raised here is fatal to a run: the feed is either built from
all configured sources or not built at all.
"""


class HawthRSSError(Exception):
    """Base class for all HawthRSS errors."""


class ConfigurationError(HawthRSSError, ValueError):
    """Invalid or conflicting source options, filters or config file."""


class FetchError(HawthRSSError):
    """Network failure or non-success response while fetching a feed."""


class ParseError(HawthRSSError):
    """Malformed feed payload or an entry missing a required field."""
