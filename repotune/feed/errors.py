"""Activity feed fetch errors."""

from __future__ import annotations


class FeedFetchError(RuntimeError):
    """Base class for failures while fetching a poll batch.

    The polling driver catches this family, logs it, and skips the cycle.
    """


class FeedAPIError(FeedFetchError):
    """Raised when the feed returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int) -> FeedAPIError:
        """Return an error for non-2xx HTTP responses."""
        return cls(f"Feed HTTP {status_code}", status_code=status_code)


class FeedTransportError(FeedFetchError):
    """Raised when the request never produced a usable HTTP response."""

    @classmethod
    def from_exception(cls, exc: BaseException) -> FeedTransportError:
        """Wrap a transport-level exception raised by the HTTP client."""
        return cls(f"Feed request failed: {type(exc).__name__}: {exc}")


class FeedResponseShapeError(FeedFetchError):
    """Raised when a feed response body cannot be interpreted."""

    @classmethod
    def invalid_json(cls) -> FeedResponseShapeError:
        """Return an error for a body that is not valid JSON."""
        return cls("Feed response is not valid JSON")

    @classmethod
    def undecodable(cls, exc: BaseException) -> FeedResponseShapeError:
        """Return an error for a body the HTTP client could not decode."""
        return cls(f"Feed response body could not be decoded: {exc}")

    @classmethod
    def not_a_list(cls, actual: object) -> FeedResponseShapeError:
        """Return an error for a JSON body that is not an array of events."""
        return cls(f"Feed response must be a JSON array, got {type(actual).__name__}")


class FeedSourceError(FeedFetchError):
    """Raised when a poll targets a source the client cannot address."""

    @classmethod
    def invalid_source(cls, source: str) -> FeedSourceError:
        """Return an error for a source that is not an ``owner/name`` slug."""
        return cls(f"Feed source must be an 'owner/name' slug, got {source!r}")
