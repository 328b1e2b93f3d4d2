from .transit import (
    FeedDecodeError,
    FeedError,
    FeedFetchError,
    LoadError,
    NotFoundError,
    TransitError,
    UnknownReferenceError,
)

__all__ = [
    "FeedDecodeError",
    "FeedError",
    "FeedFetchError",
    "LoadError",
    "NotFoundError",
    "TransitError",
    "UnknownReferenceError",
]
