"""TCP client for the Skyline logger on the device."""

from __future__ import annotations

import codecs
import logging
import socket
from collections.abc import Iterator

from skylinectl.core.errors import ListenConnectError, ListenStreamError
from skylinectl.core.model import CloseReason, ListenState

LOG_PORT = 6969
LOGGER = logging.getLogger(__name__)


class ListenSession:
    """A connected log stream.

    ``stream()`` waits for the readiness marker, then yields decoded text as
    each chunk arrives. The generator ends when the device closes the
    connection or when ``cancel()`` is called; the socket is closed on every
    exit path through ``close()``.
    """

    def __init__(
        self,
        sock: socket.socket,
        address: str,
        *,
        ready_marker: bytes | None = None,
        chunk_size: int = 4096,
        encoding: str = "utf-8",
    ) -> None:
        self._sock = sock
        self.address = address
        self.ready_marker = ready_marker
        self.chunk_size = chunk_size
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._cancelled = False
        self._streamed = False
        self.state = ListenState.WAITING_FOR_HANDSHAKE
        self.close_reason: CloseReason | None = None

    def __enter__(self) -> ListenSession:
        return self

    def __exit__(self, exc_type: object, *_: object) -> None:
        if exc_type is KeyboardInterrupt:
            self._cancelled = True
        self.close()

    def _finish(self, reason: CloseReason) -> None:
        if self.close_reason is None:
            self.close_reason = reason
        self.state = ListenState.CLOSED

    def cancel(self) -> None:
        """Stop the stream; safe to call from another thread."""
        self._cancelled = True
        try:
            self._sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Not connected anymore; close() still releases the descriptor.
            LOGGER.debug("Log socket to %s already shut down", self.address)

    def close(self) -> None:
        if self.close_reason is None:
            self._finish(self._closed_by())
        self._sock.close()

    def _recv(self) -> bytes:
        try:
            return self._sock.recv(self.chunk_size)
        except (ConnectionResetError, ConnectionAbortedError):
            return b""
        except OSError as exc:
            if self._cancelled:
                return b""
            self._finish(CloseReason.ERROR)
            raise ListenStreamError(f"Log stream from {self.address} failed: {exc}") from exc

    def _closed_by(self) -> CloseReason:
        return CloseReason.CANCELLED if self._cancelled else CloseReason.REMOTE_CLOSED

    def _handshake(self) -> bytes | None:
        """Block until the device is ready; return the first bytes to emit."""
        buffer = b""
        while not self._cancelled:
            data = self._recv()
            if not data:
                break
            if self.ready_marker is None:
                return data
            buffer += data
            index = buffer.find(self.ready_marker)
            if index != -1:
                return buffer[index + len(self.ready_marker) :]
            # Keep just enough of the preamble to match a marker split across reads.
            buffer = buffer[-(len(self.ready_marker) - 1) :] if len(self.ready_marker) > 1 else b""
        self._finish(self._closed_by())
        return None

    def stream(self) -> Iterator[str]:
        if self._streamed:
            raise RuntimeError("A log stream can only be consumed once")
        self._streamed = True

        first = self._handshake()
        if first is None:
            return
        self.state = ListenState.STREAMING
        LOGGER.debug("Log stream from %s is ready", self.address)

        data = first
        while True:
            text = self._decoder.decode(data)
            if text:
                yield text
            if self._cancelled:
                break
            data = self._recv()
            if not data:
                break

        tail = self._decoder.decode(b"", final=True)
        if tail:
            yield tail
        self._finish(self._closed_by())


class LogListener:
    """Opens log sessions.

    ``state`` and ``close_reason`` here cover only the connect phase; once
    ``connect()`` returns, the ``ListenSession`` owns the state machine.
    """

    def __init__(
        self,
        *,
        port: int = LOG_PORT,
        connect_timeout_s: float = 10.0,
        ready_marker: bytes | None = None,
        chunk_size: int = 4096,
    ) -> None:
        self.port = port
        self.connect_timeout_s = connect_timeout_s
        self.ready_marker = ready_marker
        self.chunk_size = chunk_size
        self.state = ListenState.IDLE
        self.close_reason: CloseReason | None = None

    def connect(self, address: str) -> ListenSession:
        self.state = ListenState.CONNECTING
        try:
            sock = socket.create_connection((address, self.port), timeout=self.connect_timeout_s)
        except OSError as exc:
            self.state = ListenState.CLOSED
            self.close_reason = CloseReason.CONNECT_FAILURE
            raise ListenConnectError(
                f"Could not connect to {address}:{self.port} for logs: {exc}"
            ) from exc

        # Reads block until the device writes or closes; no idle timeout.
        sock.settimeout(None)
        self.state = ListenState.WAITING_FOR_HANDSHAKE
        LOGGER.debug("Connected to log port %s:%s", address, self.port)
        return ListenSession(
            sock,
            address,
            ready_marker=self.ready_marker,
            chunk_size=self.chunk_size,
        )
