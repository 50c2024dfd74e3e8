"""
Score transport: a line-oriented TCP client, a threaded server and a
background submitter.

Wire format, one UTF-8 line per submission:

    <name>\\t<score>\\n

The server answers each line with ``OK`` or ``ERR <reason>``.
"""

from __future__ import annotations

import queue as queue_mod
import socket
import socketserver
import sys
import threading
from typing import Callable

from blockdrop.leaderboard import Leaderboard

DEFAULT_PORT = 8080
ENCODING = "utf-8"

# Longest submission line the server accepts, newline included.
MAX_LINE = 1024


class ScoreTransportError(OSError):
    """The server rejected a submission or closed the connection."""


def encode_score(name: str, score: int) -> bytes:
    """Serialize one submission. Tabs and newlines in the name become spaces."""
    clean = " ".join(name.replace("\t", " ").splitlines()).strip()
    return f"{clean}\t{int(score)}\n".encode(ENCODING)


def decode_score(line: bytes) -> tuple[str, int]:
    """Parse one submission line.

    Raises:
        ValueError: If the line is not ``<name>\\t<non-negative int>``.
    """
    text = line.decode(ENCODING).rstrip("\r\n")
    name, sep, score_text = text.rpartition("\t")
    name = name.strip()
    if not sep or not name:
        raise ValueError("expected '<name>\\t<score>'")
    score = int(score_text)
    if score < 0:
        raise ValueError(f"negative score {score}")
    return name, score


# ── Client ──────────────────────────────────────────────────────────────────

class ScoreClient:
    """Synchronous one-shot client: connect, send scores, disconnect."""

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._reader = None

    def connect(self, address: str, port: int = DEFAULT_PORT, timeout: float = 5.0) -> None:
        """Open a connection to a score server."""
        self._sock = socket.create_connection((address, port), timeout=timeout)
        self._reader = self._sock.makefile("rb")

    def send_score(self, name: str, score: int) -> None:
        """Send one score and wait for the server's acknowledgement.

        Raises:
            ScoreTransportError: If not connected, the server closed the
                connection, or it rejected the submission.
            OSError: On socket failures (including timeouts).
        """
        if self._sock is None:
            raise ScoreTransportError("not connected")
        self._sock.sendall(encode_score(name, score))
        reply = self._reader.readline()
        if not reply:
            raise ScoreTransportError("connection closed by server")
        try:
            reply_text = reply.decode(ENCODING).strip()
        except UnicodeDecodeError as e:
            raise ScoreTransportError(f"unreadable reply from server: {e}") from e
        if reply_text != "OK":
            raise ScoreTransportError(f"server rejected score: {reply_text}")

    def disconnect(self) -> None:
        """Close the connection if one is open."""
        if self._reader is not None:
            self._reader.close()
            self._reader = None
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "ScoreClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()


# ── Server ──────────────────────────────────────────────────────────────────

class _ScoreRequestHandler(socketserver.StreamRequestHandler):
    def handle(self) -> None:
        """Answer each submission line until the peer disconnects."""
        while True:
            line = self.rfile.readline(MAX_LINE + 1)
            if not line:
                return
            if len(line) > MAX_LINE:
                # Over the limit; drop the connection.
                self.wfile.write(f"ERR line longer than {MAX_LINE} bytes\n".encode(ENCODING))
                return
            if not line.strip():
                continue
            try:
                name, score = decode_score(line)
            except ValueError as e:
                self.wfile.write(f"ERR {e}\n".encode(ENCODING))
                continue
            self.server.leaderboard.submit(name, score)
            self.wfile.write(b"OK\n")


class _ThreadingScoreServer(socketserver.ThreadingTCPServer):
    allow_reuse_address = True
    daemon_threads = True

    def __init__(self, address: tuple[str, int], leaderboard: Leaderboard) -> None:
        self.leaderboard = leaderboard
        super().__init__(address, _ScoreRequestHandler)


class ScoreServer:
    """Accepts score submissions and records them in a shared Leaderboard.

    Attributes:
        leaderboard: Store updated by every accepted submission.
        host: Interface to bind.
        port: Port to bind (0 picks a free one; see ``address``).
    """

    def __init__(self, leaderboard: Leaderboard, host: str = "0.0.0.0", port: int = DEFAULT_PORT) -> None:
        self.leaderboard = leaderboard
        self.host = host
        self.port = port
        self._server: _ThreadingScoreServer | None = None
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        """The bound (host, port), available once the server is started."""
        if self._server is None:
            raise RuntimeError("server is not running")
        host, port = self._server.server_address[:2]
        return host, port

    def _bind(self) -> _ThreadingScoreServer:
        """Create the listening server on the configured host and port."""
        self._server = _ThreadingScoreServer((self.host, self.port), self.leaderboard)
        return self._server

    def start(self) -> "ScoreServer":
        """Serve on a daemon thread and return immediately."""
        server = self._bind()
        self._thread = threading.Thread(target=server.serve_forever, name="score-server", daemon=True)
        self._thread.start()
        print(f"Score server listening on {self.address[0]}:{self.address[1]}", flush=True)
        return self

    def serve_forever(self) -> None:
        """Serve on the calling thread until interrupted."""
        server = self._bind()
        print(f"Score server listening on {self.address[0]}:{self.address[1]}", flush=True)
        try:
            server.serve_forever()
        finally:
            server.server_close()
            self._server = None

    def stop(self) -> None:
        """Stop serving and release the socket. Safe to call twice."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._server = None


# ── Background submitter ────────────────────────────────────────────────────

class ScoreSubmitter:
    """Pushes scores to a remote server from a background thread.

    submit() only enqueues, so the game loop never waits on the network.
    Failures are reported and counted, never raised.
    """

    def __init__(
        self,
        address: str,
        port: int = DEFAULT_PORT,
        timeout: float = 5.0,
        client_factory: Callable[[], ScoreClient] = ScoreClient,
    ) -> None:
        self.address = address
        self.port = port
        self.timeout = timeout
        self.sent = 0
        self.failed = 0
        self._client_factory = client_factory
        self._queue: queue_mod.Queue = queue_mod.Queue()
        self._thread = threading.Thread(target=self._worker, name="score-submitter", daemon=True)
        self._thread.start()

    def _worker(self) -> None:
        """Send queued scores one connection at a time until the sentinel arrives."""
        while True:
            item = self._queue.get()
            if item is None:
                break
            name, score = item
            try:
                with self._client_factory() as client:
                    client.connect(self.address, self.port, self.timeout)
                    client.send_score(name, score)
            except Exception as e:
                self.failed += 1
                print(f"Could not send score to {self.address}:{self.port}: {e}", file=sys.stderr, flush=True)
            else:
                self.sent += 1
                print(f"Score sent to {self.address}:{self.port} ({name}: {score})", flush=True)

    def submit(self, name: str, score: int) -> None:
        """Queue a score for delivery and return immediately."""
        self._queue.put_nowait((name, score))

    def shutdown(self, timeout: float = 5.0) -> None:
        """Send what is still queued, then stop the worker thread."""
        self._queue.put(None)
        self._thread.join(timeout=timeout)
