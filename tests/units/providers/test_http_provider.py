"""Unit tests for the HttpProvider."""

import socket
import threading
import time
from collections.abc import Callable, Generator, Iterator
from unittest.mock import ANY, MagicMock, PropertyMock, patch

import pytest
import requests
from licita_brasil.exceptions.upstream import UpstreamCancelledError, UpstreamError, UpstreamTimeoutError
from licita_brasil.providers.deadline import CancellationToken, Deadline
from licita_brasil.providers.http import BufferedResponse, HttpProvider, InFlightCall
from requests.exceptions import ConnectTimeout, ReadTimeout


@pytest.fixture
def mock_config() -> Generator[MagicMock, None, None]:
    """Fixture for a mocked ConfigProvider."""
    with patch("licita_brasil.providers.config.ConfigProvider.get_config") as mock_get_config:
        mock_config_instance = MagicMock()
        mock_config_instance.USER_AGENT = "LicitaBrasil/test"
        mock_config_instance.LOG_LEVEL = "INFO"
        mock_get_config.return_value = mock_config_instance
        yield mock_config_instance


def _streamed_response(chunks: list[bytes] | Iterator[bytes], status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.url = "http://example.com/data?page=1"
    response.headers = {"Content-Type": "application/json"}
    response.encoding = "utf-8"
    response.iter_content.return_value = chunks
    return response


def test_get_session_is_configured_once(mock_config: MagicMock) -> None:
    """Tests that the session ignores proxies, sends our headers and is reused."""
    provider = HttpProvider(pool_size=4)

    session = provider._get_session()

    assert isinstance(session, requests.Session)
    assert session.trust_env is False
    assert session.headers["User-Agent"] == "LicitaBrasil/test"
    assert session.headers["Accept"] == "application/json"
    assert provider._get_session() is session


@patch("requests.Session.get")
def test_get_within_deadline_reads_whole_body(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that a streamed body is buffered and the connection released."""
    response = _streamed_response([b'{"data": ', b"[1, 2]}"])
    mock_get.return_value = response
    provider = HttpProvider()

    result = provider.get_within_deadline("http://example.com/data", Deadline(5), params={"page": "1"})

    assert isinstance(result, BufferedResponse)
    assert result.ok
    assert result.json() == {"data": [1, 2]}
    assert result.url == "http://example.com/data?page=1"
    mock_get.assert_called_once_with("http://example.com/data", stream=True, timeout=(ANY, ANY), params={"page": "1"})
    connect_timeout, read_timeout = mock_get.call_args.kwargs["timeout"]
    assert 0 < connect_timeout <= 5
    assert 0 < read_timeout <= 5
    response.__exit__.assert_called_once()


@patch("requests.Session.get")
def test_get_within_deadline_returns_error_statuses(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that non-2xx answers are returned to the caller instead of raised."""
    mock_get.return_value = _streamed_response([b"Bad request"], status_code=400)

    result = HttpProvider().get_within_deadline("http://example.com", Deadline(5))

    assert not result.ok
    assert result.status_code == 400
    assert result.text == "Bad request"


@patch("requests.Session.get", side_effect=ReadTimeout("read timed out"))
def test_get_within_deadline_maps_timeouts(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that a socket timeout becomes an UpstreamTimeoutError and is not retried."""
    with pytest.raises(UpstreamTimeoutError) as exc_info:
        HttpProvider().get_within_deadline("http://example.com", Deadline(2))

    assert exc_info.value.seconds == 2
    assert mock_get.call_count == 1


@patch("requests.Session.get", side_effect=requests.ConnectionError("connection refused"))
def test_get_within_deadline_maps_connection_errors(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that a failure without a response becomes a status-less UpstreamError."""
    with pytest.raises(UpstreamError) as exc_info:
        HttpProvider().get_within_deadline("http://example.com", Deadline(5))

    assert exc_info.value.status is None
    assert not isinstance(exc_info.value, UpstreamTimeoutError)


@patch("requests.Session.get")
def test_get_within_deadline_expires_between_chunks(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that a body still arriving when the deadline passes is abandoned."""
    response = _streamed_response([b"first", b"second"])
    mock_get.return_value = response
    deadline = MagicMock(spec=Deadline)
    deadline.seconds = 1.0
    deadline.remaining.return_value = 1.0
    type(deadline).expired = PropertyMock(side_effect=[False, False, True])

    with pytest.raises(UpstreamTimeoutError):
        HttpProvider().get_within_deadline("http://example.com", deadline)

    response.__exit__.assert_called_once()


@patch("requests.Session.get")
def test_get_within_deadline_honours_cancellation(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that setting the token while the body streams aborts the call."""
    token = CancellationToken()

    def chunks() -> Iterator[bytes]:
        yield b"first"
        token.cancel()
        yield b"second"

    response = _streamed_response(chunks())
    mock_get.return_value = response

    with pytest.raises(UpstreamCancelledError):
        HttpProvider().get_within_deadline("http://example.com", Deadline(5), token)

    response.__exit__.assert_called_once()


@patch("requests.Session.get")
def test_get_within_deadline_skips_cancelled_calls(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that no request is sent once the token is already set."""
    token = CancellationToken()
    token.cancel()

    with pytest.raises(UpstreamCancelledError):
        HttpProvider().get_within_deadline("http://example.com", Deadline(5), token)

    mock_get.assert_not_called()


@patch("requests.Session.get")
def test_get_successful(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests a successful GET request."""
    mock_response = MagicMock()
    mock_response.status_code = 200
    mock_get.return_value = mock_response

    response = HttpProvider().get("http://example.com")

    assert response.status_code == 200
    mock_get.assert_called_once_with("http://example.com", timeout=(5, 30))


@patch("requests.Session.get", side_effect=ConnectTimeout)
def test_get_retry_on_connect_timeout(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that GET requests are retried on ConnectTimeout."""
    with pytest.raises(ConnectTimeout):
        HttpProvider().get("http://example.com")
    assert mock_get.call_count == 3


def test_close_discards_session(mock_config: MagicMock) -> None:
    """Tests that closing drops the session so the next call opens a new one."""
    provider = HttpProvider()
    session = provider._get_session()

    provider.close()

    assert provider._session is None
    assert provider._get_session() is not session


def _read_request(conn: socket.socket) -> None:
    received = b""
    while b"\r\n\r\n" not in received:
        data = conn.recv(1024)
        if not data:
            return
        received += data


def _trickle_body(conn: socket.socket, stop: threading.Event) -> None:
    _read_request(conn)
    conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 8\r\n\r\n")
    for _ in range(8):
        if stop.wait(0.6):
            return
        conn.sendall(b"1")


def _late_headers(conn: socket.socket, stop: threading.Event) -> None:
    _read_request(conn)
    if stop.wait(3.0):
        return
    conn.sendall(b"HTTP/1.1 200 OK\r\nContent-Type: application/json\r\nContent-Length: 2\r\n\r\n{}")


@pytest.fixture
def slow_server() -> Generator[Callable[[Callable[[socket.socket, threading.Event], None]], str], None, None]:
    """Fixture that serves one connection with a deliberately slow handler."""
    stop = threading.Event()
    listeners: list[socket.socket] = []
    threads: list[threading.Thread] = []

    def serve(handler: Callable[[socket.socket, threading.Event], None]) -> str:
        listener = socket.create_server(("127.0.0.1", 0))
        listeners.append(listener)

        def run() -> None:
            conn, _ = listener.accept()
            with conn:
                try:
                    handler(conn, stop)
                except OSError:
                    pass

        thread = threading.Thread(target=run, daemon=True)
        thread.start()
        threads.append(thread)
        return f"http://127.0.0.1:{listener.getsockname()[1]}/slow"

    yield serve

    stop.set()
    for thread in threads:
        thread.join(timeout=5)
    for listener in listeners:
        listener.close()


def test_get_within_deadline_stops_trickled_body_at_deadline(
    mock_config: MagicMock, slow_server: Callable[..., str]
) -> None:
    """Tests that a body arriving one byte at a time cannot outlive the deadline."""
    url = slow_server(_trickle_body)
    provider = HttpProvider()
    started = time.monotonic()

    with pytest.raises(UpstreamTimeoutError) as exc_info:
        provider.get_within_deadline(url, Deadline(1.0))

    elapsed = time.monotonic() - started
    provider.close()
    assert exc_info.value.seconds == 1.0
    assert 0.9 <= elapsed < 1.8


def test_get_within_deadline_stops_waiting_for_headers_on_cancel(
    mock_config: MagicMock, slow_server: Callable[..., str]
) -> None:
    """Tests that cancelling the token aborts a call still waiting for the headers."""
    url = slow_server(_late_headers)
    provider = HttpProvider()
    token = CancellationToken()
    canceller = threading.Timer(0.3, token.cancel)
    started = time.monotonic()
    canceller.start()

    with pytest.raises(UpstreamCancelledError):
        provider.get_within_deadline(url, Deadline(10), token)

    elapsed = time.monotonic() - started
    canceller.cancel()
    provider.close()
    assert elapsed < 1.5


@patch("requests.Session.get")
def test_get_within_deadline_unregisters_from_token(mock_get: MagicMock, mock_config: MagicMock) -> None:
    """Tests that a finished call leaves nothing behind on the shared token."""
    mock_get.return_value = _streamed_response([b"{}"])
    token = CancellationToken()

    HttpProvider().get_within_deadline("http://example.com", Deadline(5), token)

    assert token._callbacks == []


def test_in_flight_call_ignores_abort_after_release() -> None:
    """Tests that a late abort leaves a connection returned to the pool alone."""
    connection = MagicMock()
    call = InFlightCall()
    call.attach(connection)

    call.release()
    call.abort("deadline")

    assert call.reason is None
    connection.sock.shutdown.assert_not_called()


def test_in_flight_call_abort_shuts_socket_down() -> None:
    """Tests that aborting wakes the reader by shutting the socket down."""
    connection = MagicMock()
    call = InFlightCall()
    call.attach(connection)

    call.abort("cancelled")
    call.abort("deadline")

    assert call.reason == "cancelled"
    connection.sock.shutdown.assert_called_once_with(socket.SHUT_RDWR)
