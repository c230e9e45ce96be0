"""Feed fetch collaborators used by the polling driver."""

from __future__ import annotations

import dataclasses
import typing as typ

import httpx
import msgspec

from repotune.common.env import parse_float, parse_int, parse_str
from repotune.common.slug import parse_repo_slug

from .errors import (
    FeedAPIError,
    FeedResponseShapeError,
    FeedSourceError,
    FeedTransportError,
)

if typ.TYPE_CHECKING:
    from .models import RawRecord

_DEFAULT_ENDPOINT = "https://api.github.com"
_DEFAULT_TIMEOUT_S = 20.0
_DEFAULT_PAGE_SIZE = 30
_MAX_PAGE_SIZE = 100
_HTTP_ERROR_STATUS_THRESHOLD = 400


@typ.runtime_checkable
class FeedFetcher(typ.Protocol):
    """Interface for fetching one poll batch from an activity feed."""

    async def fetch(self, source: str) -> typ.Sequence[RawRecord]:
        """Return the raw records currently published for ``source``.

        Records are returned newest first, as the GitHub events API orders
        them. The polling driver logs and skips any exception raised here;
        :class:`GitHubEventsClient` raises :class:`FeedFetchError`
        subclasses so failures are categorised.
        """
        ...


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubEventsConfig:
    """Configuration for the GitHub repository events client."""

    endpoint: str = _DEFAULT_ENDPOINT
    timeout_s: float = _DEFAULT_TIMEOUT_S
    page_size: int = _DEFAULT_PAGE_SIZE
    user_agent: str = "repotune/0.1"

    @classmethod
    def from_env(cls) -> GitHubEventsConfig:
        """Build configuration from environment variables.

        Reads ``REPOTUNE_FEED_ENDPOINT``, ``REPOTUNE_FEED_TIMEOUT_S`` and
        ``REPOTUNE_FEED_PAGE_SIZE``; unset values keep their defaults.
        """
        endpoint = parse_str("REPOTUNE_FEED_ENDPOINT", _DEFAULT_ENDPOINT)
        page_size = parse_int("REPOTUNE_FEED_PAGE_SIZE", _DEFAULT_PAGE_SIZE)
        return cls(
            endpoint=(endpoint or _DEFAULT_ENDPOINT).rstrip("/"),
            timeout_s=parse_float(
                "REPOTUNE_FEED_TIMEOUT_S", _DEFAULT_TIMEOUT_S, minimum=0.1
            ),
            page_size=min(page_size, _MAX_PAGE_SIZE),
        )


class GitHubEventsClient:
    """Fetch public repository events from the GitHub REST API.

    Parameters
    ----------
    config
        Endpoint, timeout and page size settings.
    http_client
        Optional ``httpx.AsyncClient`` for testing. When omitted the client
        creates and owns its own instance.

    """

    def __init__(
        self,
        config: GitHubEventsConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Create a client bound to ``config``."""
        self._config = config or GitHubEventsConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=self._config.timeout_s,
            headers={
                "Accept": "application/vnd.github+json",
                "User-Agent": self._config.user_agent,
            },
        )

    @property
    def config(self) -> GitHubEventsConfig:
        """Read-only access to the client configuration."""
        return self._config

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    def events_url(self, source: str) -> str:
        """Return the events URL for a repository slug."""
        try:
            owner, name = parse_repo_slug(source)
        except ValueError as exc:
            raise FeedSourceError.invalid_source(source) from exc
        return f"{self._config.endpoint}/repos/{owner}/{name}/events"

    async def fetch(self, source: str) -> list[RawRecord]:
        """Fetch the newest page of events for ``source``."""
        url = self.events_url(source)
        try:
            response = await self._client.get(
                url, params={"per_page": self._config.page_size}
            )
        except httpx.DecodingError as exc:
            raise FeedResponseShapeError.undecodable(exc) from exc
        except httpx.HTTPError as exc:
            raise FeedTransportError.from_exception(exc) from exc

        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise FeedAPIError.http_error(response.status_code)
        return _parse_events_payload(response.content)


def _parse_events_payload(content: bytes) -> list[RawRecord]:
    """Decode a response body into a list of JSON objects.

    Non-object array items are dropped here; field-level validation happens
    at the filter boundary.
    """
    try:
        payload = msgspec.json.decode(content)
    except msgspec.DecodeError as exc:
        raise FeedResponseShapeError.invalid_json() from exc
    if not isinstance(payload, list):
        raise FeedResponseShapeError.not_a_list(payload)
    return [item for item in payload if isinstance(item, dict)]
