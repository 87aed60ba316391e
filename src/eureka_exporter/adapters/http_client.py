"""Bounded-timeout HTTP client built on httpx.

Every request runs on its own short-lived ``httpx.Client`` so the
connection is released on every exit path, after the response handler has
seen the response. httpx exceptions never leave this module; they are
translated into the TransportError family.
"""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
)

from eureka_exporter.core.errors import (
    ExporterError,
    HandlerError,
    NoResponseError,
    RequestTimeoutError,
    TransportError,
    UnreachableError,
)
from eureka_exporter.core.ports import ResponseHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CONNECT_TIMEOUT_MS = 5000
DEFAULT_REQUEST_TIMEOUT_MS = 3000
DEFAULT_SOCKET_TIMEOUT_MS = 5000
# Read timeout used when nobody is waiting for the response body.
FIRE_AND_FORGET_SOCKET_TIMEOUT_MS = 1
MAX_NO_RESPONSE_RETRIES = 3

# httpcore wording for a connection closed before any response bytes.
NO_RESPONSE_MESSAGE = "Server disconnected without sending a response"

_METHODS = {"GET", "POST"}


def _resolve(value: int | None, default: int) -> int:
    if value is None or value < 0:
        return default
    return value


def _translate(
    exc: httpx.HTTPError | httpx.InvalidURL, method: str, url: str
) -> TransportError:
    """Map an httpx exception onto the TransportError family."""
    message = f"{method} {url}: {exc}"
    if isinstance(exc, httpx.TimeoutException):
        return RequestTimeoutError(message)
    if isinstance(exc, httpx.ConnectError):
        return UnreachableError(message)
    if isinstance(exc, httpx.RemoteProtocolError) and NO_RESPONSE_MESSAGE in str(exc):
        return NoResponseError(message)
    return TransportError(message)


class HttpClient:
    """HTTP client issuing GET/POST requests with explicit timeouts.

    Requests that fail because the server closed the connection without
    sending any response are retried up to MAX_NO_RESPONSE_RETRIES times;
    every other failure, other protocol errors included, propagates
    immediately.
    """

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        max_retries: int = MAX_NO_RESPONSE_RETRIES,
    ) -> None:
        """Initialize the client.

        Args:
            transport: Optional httpx transport (e.g. httpx.MockTransport
                in tests). Defaults to a fresh HTTPTransport per request.
            max_retries: Retries after the first attempt on no-response errors.
        """
        self._transport = transport
        self._max_retries = max_retries

    def get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        handler: ResponseHandler[T] | None = None,
        connect_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        socket_timeout_ms: int | None = None,
    ) -> T | None:
        """Send a GET request; params are appended as a query string."""
        return self.request(
            "GET",
            url,
            params,
            handler,
            connect_timeout_ms,
            request_timeout_ms,
            socket_timeout_ms,
        )

    def post(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        handler: ResponseHandler[T] | None = None,
        connect_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        socket_timeout_ms: int | None = None,
    ) -> T | None:
        """Send a POST request; params are sent as a form-encoded body."""
        return self.request(
            "POST",
            url,
            params,
            handler,
            connect_timeout_ms,
            request_timeout_ms,
            socket_timeout_ms,
        )

    def request(
        self,
        method: str,
        url: str,
        params: Mapping[str, Any] | None = None,
        handler: ResponseHandler[T] | None = None,
        connect_timeout_ms: int | None = None,
        request_timeout_ms: int | None = None,
        socket_timeout_ms: int | None = None,
    ) -> T | None:
        """Send a request and pass the response to handler.

        Args:
            method: "GET" or "POST".
            url: Absolute request URL.
            params: Query parameters (GET) or form fields (POST).
            handler: Called with the fully read response before the
                connection is released. Without a handler the read timeout
                drops to FIRE_AND_FORGET_SOCKET_TIMEOUT_MS and a read
                timeout is ignored.
            connect_timeout_ms: Connect timeout; None or negative means
                DEFAULT_CONNECT_TIMEOUT_MS.
            request_timeout_ms: Connection acquisition timeout; None or
                negative means DEFAULT_REQUEST_TIMEOUT_MS.
            socket_timeout_ms: Read/write timeout; None or negative means
                DEFAULT_SOCKET_TIMEOUT_MS. Writes keep it even without a
                handler.

        Returns:
            The handler's return value, or None without a handler.

        Raises:
            ValueError: If method is not GET or POST.
            TransportError: On connection, timeout or no-response failures.
            ParseError: Propagated unchanged from handler.
            HandlerError: If handler raises anything else.
        """
        method = method.upper()
        if method not in _METHODS:
            raise ValueError(f"unsupported method: {method}")

        connect_ms = _resolve(connect_timeout_ms, DEFAULT_CONNECT_TIMEOUT_MS)
        pool_ms = _resolve(request_timeout_ms, DEFAULT_REQUEST_TIMEOUT_MS)
        write_ms = _resolve(socket_timeout_ms, DEFAULT_SOCKET_TIMEOUT_MS)
        if handler is None:
            socket_ms = FIRE_AND_FORGET_SOCKET_TIMEOUT_MS
        else:
            socket_ms = write_ms

        timeout = httpx.Timeout(
            connect=connect_ms / 1000,
            read=socket_ms / 1000,
            write=write_ms / 1000,
            pool=pool_ms / 1000,
        )
        request_kwargs: dict[str, Any] = {}
        if params:
            key = "params" if method == "GET" else "data"
            request_kwargs[key] = {k: str(v) for k, v in params.items()}

        logger.debug(
            "%s %s (connect=%dms request=%dms socket=%dms)",
            method,
            url,
            connect_ms,
            pool_ms,
            socket_ms,
        )

        with httpx.Client(timeout=timeout, transport=self._transport) as client:
            if handler is None:
                try:
                    self._send(client, method, url, request_kwargs, None)
                except RequestTimeoutError as exc:
                    if not isinstance(exc.__cause__, httpx.ReadTimeout):
                        raise
                    logger.debug("%s %s: response not awaited", method, url)
                return None
            return self._send(client, method, url, request_kwargs, handler)

    def _send(
        self,
        client: httpx.Client,
        method: str,
        url: str,
        request_kwargs: dict[str, Any],
        handler: ResponseHandler[T] | None,
    ) -> T | None:
        retrying = Retrying(
            retry=retry_if_exception_type(NoResponseError),
            stop=stop_after_attempt(self._max_retries + 1),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        return retrying(self._attempt, client, method, url, request_kwargs, handler)

    @staticmethod
    def _attempt(
        client: httpx.Client,
        method: str,
        url: str,
        request_kwargs: dict[str, Any],
        handler: ResponseHandler[T] | None,
    ) -> T | None:
        try:
            request = client.build_request(method, url, **request_kwargs)
            response = client.send(request, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise _translate(exc, method, url) from exc
        try:
            try:
                response.read()
            except httpx.TimeoutException as exc:
                raise RequestTimeoutError(f"{method} {url}: {exc}") from exc
            except httpx.HTTPError as exc:
                raise TransportError(f"{method} {url}: {exc}") from exc
            if handler is None:
                return None
            return _run_handler(handler, response)
        finally:
            response.close()


def _run_handler(handler: ResponseHandler[T], response: httpx.Response) -> T:
    try:
        return handler(response)
    except ExporterError:
        raise
    except Exception as exc:
        raise HandlerError(
            f"response handler failed for {response.request.url}: {exc}"
        ) from exc
