"""Port interfaces between the scrape pipeline and its I/O adapters.

The collector depends only on these protocols, so tests and alternative
transports can stand in for the bundled httpx-based client.
"""

from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, runtime_checkable

from eureka_exporter.core.models import Snapshot

if TYPE_CHECKING:
    import httpx

T = TypeVar("T")

ResponseHandler = Callable[["httpx.Response"], T]


@runtime_checkable
class HttpRequesterPort(Protocol):
    """Port for bounded-timeout HTTP requests.

    Examples: HttpClient.
    """

    def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        handler: ResponseHandler[T] | None = None,
        connect_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        socket_timeout_ms: int | None = None,
    ) -> T | None:
        """Issue a GET request and hand the response to handler.

        Returns:
            Whatever handler returns, or None without a handler.
        """
        ...


@runtime_checkable
class CollectorPort(Protocol):
    """Port for anything that produces a metrics snapshot on demand.

    Examples: EurekaCollector.
    """

    def collect(self) -> Snapshot:
        """Run one scrape cycle and return its snapshot."""
        ...
