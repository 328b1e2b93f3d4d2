class TransitError(Exception):
    """Base exception for live transit failures."""


class LoadError(TransitError):
    """Raised at startup when a required reference file is missing or unreadable."""


class FeedError(TransitError):
    """Base exception for a failed realtime poll cycle."""


class FeedFetchError(FeedError):
    """Raised when the realtime feed cannot be fetched (network or non-2xx)."""


class FeedDecodeError(FeedError):
    """Raised when the realtime payload is not a valid feed message."""


class UnknownReferenceError(TransitError):
    """Raised when a realtime identifier has no match in the reference data."""


class NotFoundError(TransitError):
    """Raised when a query names a stop or route that does not exist."""
