"""This module provides a centralized HTTP client for the application."""

import functools
import json
import socket
import threading
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from typing import Any

import requests
from licita_brasil.exceptions.upstream import UpstreamCancelledError, UpstreamError, UpstreamTimeoutError
from licita_brasil.providers.config import Config, ConfigProvider
from licita_brasil.providers.deadline import CancellationToken, Deadline
from licita_brasil.providers.logging import Logger, LoggingProvider
from requests.adapters import HTTPAdapter
from requests.exceptions import ConnectTimeout, ReadTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_random_exponential
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool

_ABORT_DEADLINE = "deadline"
_ABORT_CANCELLED = "cancelled"

_current = threading.local()


class InFlightCall:
    """The connection carrying one deadline-bound call, and the means to abort it.

    Aborting shuts the socket down, which wakes the thread blocked on it.
    The owning thread then fails with a connection error, and the abort
    reason tells it how to report that error.

    Attributes:
        reason: Why the call was aborted, or None while it is still wanted.
    """

    reason: str | None

    def __init__(self) -> None:
        """Initializes a call with no connection attached."""
        self.reason = None
        self._released = False
        self._connection: HTTPConnection | None = None
        self._lock = threading.Lock()

    def attach(self, connection: HTTPConnection) -> None:
        """Binds the call to the connection sending it.

        Args:
            connection: The pooled connection in use by the current thread.
        """
        with self._lock:
            if self._released:
                return
            self._connection = connection
            if self.reason is not None:
                _shutdown(connection)

    def abort(self, reason: str) -> None:
        """Aborts the call. Only the first reason given is kept.

        Args:
            reason: Either the deadline or the cancellation marker.
        """
        with self._lock:
            if self.reason is not None or self._released:
                return
            self.reason = reason
            if self._connection is not None:
                _shutdown(self._connection)

    def release(self) -> None:
        """Detaches the connection before it goes back to the pool.

        A late abort must not shut down a connection another call may reuse.
        """
        with self._lock:
            self._released = True
            self._connection = None


def _shutdown(connection: HTTPConnection) -> None:
    sock = getattr(connection, "sock", None)
    if sock is not None:
        with suppress(OSError):
            sock.shutdown(socket.SHUT_RDWR)


@contextmanager
def _tracking(call: InFlightCall) -> Iterator[None]:
    _current.call = call
    try:
        yield
    finally:
        _current.call = None


class _TrackedConnectionMixin:
    """Attaches the connection to the in-flight call of the sending thread."""

    def request(self, *args: Any, **kwargs: Any) -> Any:
        call: InFlightCall | None = getattr(_current, "call", None)
        if call is not None:
            call.attach(self)  # type: ignore[arg-type]
        result = super().request(*args, **kwargs)  # type: ignore[misc]
        if call is not None:
            call.attach(self)  # type: ignore[arg-type]
        return result


class _TrackedHTTPConnection(_TrackedConnectionMixin, HTTPConnection):
    pass


class _TrackedHTTPSConnection(_TrackedConnectionMixin, HTTPSConnection):
    pass


class _TrackedHTTPConnectionPool(HTTPConnectionPool):
    ConnectionCls = _TrackedHTTPConnection


class _TrackedHTTPSConnectionPool(HTTPSConnectionPool):
    ConnectionCls = _TrackedHTTPSConnection


class AbortableHTTPAdapter(HTTPAdapter):
    """An HTTPAdapter whose connections can be shut down from another thread."""

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **kwargs)
        self.poolmanager.pool_classes_by_scheme = {
            "http": _TrackedHTTPConnectionPool,
            "https": _TrackedHTTPSConnectionPool,
        }


class BufferedResponse:
    """A fully read HTTP response, detached from its network connection.

    Attributes:
        url: The final URL of the request, including the query string.
        status_code: The HTTP status code.
        headers: The response headers.
        content: The raw body.
    """

    url: str
    status_code: int
    headers: dict[str, str]
    content: bytes

    def __init__(self, url: str, status_code: int, headers: dict[str, str], content: bytes, encoding: str | None):
        """Initializes the response.

        Args:
            url: The final URL of the request.
            status_code: The HTTP status code.
            headers: The response headers.
            content: The raw body.
            encoding: The body encoding announced by the server, if any.
        """
        self.url = url
        self.status_code = status_code
        self.headers = headers
        self.content = content
        self._encoding = encoding or "utf-8"

    @property
    def ok(self) -> bool:
        """Whether the status code is in the 2xx range."""
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        """The body decoded as text."""
        return self.content.decode(self._encoding, errors="replace")

    def json(self) -> Any:
        """Parses the body as JSON.

        Returns:
            The decoded JSON document.
        """
        return json.loads(self.text)


class HttpProvider:
    """A centralized HTTP client that manages a requests.Session.

    Two kinds of GET are offered. `get_within_deadline` enforces a total
    time budget and never retries; it is used for the procurement registry
    and the CNPJ registry. `get` retries connection and read timeouts and is
    used for static reference data only.
    """

    _CHUNK_SIZE = 16 * 1024

    _session: requests.Session | None = None
    _config: Config
    _logger: Logger

    def __init__(self, pool_size: int = 10) -> None:
        """Initializes the HttpProvider.

        Args:
            pool_size: How many connections per host the session keeps open.
                The aggregated search issues one request per default
                modality at the same time, so this must not be lower than
                the number of default modalities.
        """
        self._config = ConfigProvider.get_config()
        self._logger = LoggingProvider().get_logger()
        self._pool_size = pool_size

    def _get_session(self) -> requests.Session:
        """Initializes and returns a singleton requests.Session object.

        The session is configured to ignore system-level proxy settings by
        setting `trust_env` to `False`.

        Returns:
            A configured `requests.Session` instance.
        """
        if self._session is None:
            session = requests.Session()
            session.trust_env = False
            adapter = AbortableHTTPAdapter(pool_connections=self._pool_size, pool_maxsize=self._pool_size)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
            session.headers.update(
                {
                    "Accept": "application/json",
                    "User-Agent": self._config.USER_AGENT,
                }
            )
            self._session = session
        return self._session

    def get_within_deadline(
        self,
        url: str,
        deadline: Deadline,
        cancel_token: CancellationToken | None = None,
        **kwargs: Any,
    ) -> BufferedResponse:
        """Performs a GET request that must finish before `deadline` expires.

        The body is streamed in chunks. A watchdog timer shuts the connection
        down when the deadline expires, and setting the cancellation token
        does the same, so a slow server cannot hold the call open whether it
        is stalling on the headers or trickling the body. Whatever the
        outcome, the underlying connection is released before this method
        returns.

        Args:
            url: The URL to request.
            deadline: The time budget for the whole call, body included.
            cancel_token: An optional token that aborts the call when set.
            **kwargs: Additional keyword arguments for requests (e.g. params).

        Returns:
            The fully read response. Non-2xx statuses are returned, not raised.

        Raises:
            UpstreamTimeoutError: If the deadline expires first.
            UpstreamCancelledError: If the cancellation token is set first.
            UpstreamError: If the request fails without any response.
        """
        self._check_still_wanted(url, deadline, cancel_token)
        session = self._get_session()
        call = InFlightCall()
        on_cancel = functools.partial(call.abort, _ABORT_CANCELLED)
        remaining = deadline.remaining()
        watchdog = threading.Timer(remaining, call.abort, args=(_ABORT_DEADLINE,))
        watchdog.daemon = True
        watchdog.start()
        if cancel_token is not None:
            cancel_token.add_callback(on_cancel)
        try:
            with _tracking(call):
                return self._read_within_deadline(session, url, deadline, cancel_token, call, remaining, **kwargs)
        finally:
            watchdog.cancel()
            if cancel_token is not None:
                cancel_token.remove_callback(on_cancel)

    def _read_within_deadline(
        self,
        session: requests.Session,
        url: str,
        deadline: Deadline,
        cancel_token: CancellationToken | None,
        call: InFlightCall,
        remaining: float,
        **kwargs: Any,
    ) -> BufferedResponse:
        try:
            response = session.get(url, stream=True, timeout=(remaining, remaining), **kwargs)
        except requests.RequestException as e:
            raise self._failure(url, deadline, cancel_token, call, e, None) from e

        with response:
            self._logger.debug(f"Request to {response.url} answered with status: {response.status_code}")
            chunks: list[bytes] = []
            try:
                for chunk in response.iter_content(chunk_size=self._CHUNK_SIZE):
                    self._check_still_wanted(url, deadline, cancel_token)
                    chunks.append(chunk)
            except requests.RequestException as e:
                raise self._failure(url, deadline, cancel_token, call, e, response.status_code) from e
            finally:
                call.release()
            if call.reason is not None:
                raise self._failure(url, deadline, cancel_token, call, None, response.status_code)
            return BufferedResponse(
                url=response.url,
                status_code=response.status_code,
                headers=dict(response.headers),
                content=b"".join(chunks),
                encoding=response.encoding,
            )

    @staticmethod
    def _failure(
        url: str,
        deadline: Deadline,
        cancel_token: CancellationToken | None,
        call: InFlightCall,
        error: requests.RequestException | None,
        status: int | None,
    ) -> UpstreamError:
        """Builds the error reported for a failed or aborted call.

        An abort shuts the socket down, which surfaces as a connection error
        or as a body that ends early; the abort reason takes precedence over
        whatever the transport reported.

        Returns:
            The exception to raise.
        """
        if call.reason == _ABORT_CANCELLED or (cancel_token is not None and cancel_token.cancelled):
            return UpstreamCancelledError(url)
        if call.reason == _ABORT_DEADLINE or isinstance(error, requests.Timeout) or deadline.expired:
            return UpstreamTimeoutError(url, deadline.seconds)
        return UpstreamError(status, str(error), message=f"Request to {url} failed: {error}")

    @staticmethod
    def _check_still_wanted(url: str, deadline: Deadline, cancel_token: CancellationToken | None) -> None:
        """Raises if the call was cancelled or its deadline has expired.

        Args:
            url: The URL being requested, for the error message.
            deadline: The deadline of the call.
            cancel_token: The optional cancellation token of the call.

        Raises:
            UpstreamCancelledError: If the token is set.
            UpstreamTimeoutError: If the deadline has expired.
        """
        if cancel_token is not None and cancel_token.cancelled:
            raise UpstreamCancelledError(url)
        if deadline.expired:
            raise UpstreamTimeoutError(url, deadline.seconds)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_random_exponential(multiplier=1, max=10),
        retry=(retry_if_exception_type(ConnectTimeout) | retry_if_exception_type(ReadTimeout)),
        reraise=True,
    )
    def get(self, url: str, **kwargs: Any) -> requests.Response:
        """Performs a GET request with a retry mechanism.

        It uses a granular timeout of 5 seconds for the connection and 30
        seconds for the read unless the caller passes its own.

        Args:
            url: The URL to request.
            **kwargs: Additional keyword arguments to pass to requests.get.

        Returns:
            The requests.Response object.
        """
        session = self._get_session()
        kwargs.setdefault("timeout", (5, 30))
        self._logger.debug(f"Fetching URL: {url} with params: {kwargs.get('params')}")
        response = session.get(url, **kwargs)
        self._logger.debug(f"Request to {response.url} completed with status: {response.status_code}")
        return response

    def close(self) -> None:
        """Closes the session."""
        if self._session:
            self._session.close()
            self._session = None
