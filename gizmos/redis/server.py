"""Single-threaded, non-blocking RESP server built on a selector loop."""

from __future__ import annotations

import argparse
import selectors
import socket
import sys
import threading
from dataclasses import dataclass, field
from typing import Optional

from gizmos.redis.cache import Cache
from gizmos.redis.commands import handle_request

_SEP = "\r\n"
_CHUNK = 1024
_ENCODING = "latin-1"


@dataclass
class _Pending:
    kind: str
    remaining: int


def _pending_for(token: str) -> _Pending:
    if not token:
        raise ValueError("empty token")
    lead = token[0]
    if lead in "$*":
        if token[1:2] == "-":
            return _Pending("nil", 0)
        count = int(token[1:])
        if count < 0:
            raise ValueError(token)
        # A bulk string is counted together with its trailing separator.
        return _Pending("$", count + 2) if lead == "$" else _Pending("*", count)
    return _Pending(lead, 0)


class RequestReader:
    """Accumulates received text until it holds one complete RESP value."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Discard anything received so far."""
        self._buffer = ""
        self._pos = 0
        self._stack: list[_Pending] = []

    def feed(self, data: str) -> Optional[str]:
        """Add received text; return the whole request once it is complete."""
        self._buffer += data
        if not self._complete():
            return None
        request = self._buffer
        self.reset()
        return request

    def _complete(self) -> bool:
        buffer = self._buffer
        while self._pos < len(buffer):
            top = self._stack[-1] if self._stack else None
            if top is None or top.kind != "$":
                end = buffer.find(_SEP, self._pos)
                if end == -1:
                    return False
                try:
                    pending = _pending_for(buffer[self._pos:end])
                except ValueError:
                    # Malformed input: hand it over so it gets an error reply.
                    return True
                self._pos = end + 2
                self._stack.append(pending)
            else:
                take = min(top.remaining, len(buffer) - self._pos)
                top.remaining -= take
                self._pos += take
                if top.remaining:
                    return False

            while self._stack and self._stack[-1].remaining == 0:
                self._stack.pop()
                if not self._stack:
                    return True
                self._stack[-1].remaining -= 1
        return False


@dataclass
class _Client:
    reader: RequestReader = field(default_factory=RequestReader)
    outgoing: bytes = b""


class RedisServer:
    """Serves the cache to any number of clients from one thread."""

    def __init__(self, host: str = "0.0.0.0", port: int = 6379, backlog: int = 10) -> None:
        self._cache = Cache()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(backlog)
            self._listener.setblocking(False)
        except OSError:
            self._listener.close()
            raise
        self.address: tuple[str, int] = self._listener.getsockname()

        self._wake_reader, self._wake_writer = socket.socketpair()
        self._wake_reader.setblocking(False)
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._listener, selectors.EVENT_READ)
        self._selector.register(self._wake_reader, selectors.EVENT_READ)
        self._clients: dict[socket.socket, _Client] = {}

        self._lock = threading.Lock()
        self._stopping = False
        self._serving = False
        self._closed = False

    def serve_forever(self) -> None:
        """Accept clients and answer their requests until shut down."""
        with self._lock:
            if self._stopping or self._closed:
                return
            self._serving = True
        try:
            while not self._stopping:
                for key, mask in self._selector.select():
                    sock = key.fileobj
                    if sock is self._wake_reader:
                        self._drain_waker()
                    elif sock is self._listener:
                        self._accept()
                    elif mask & selectors.EVENT_READ:
                        self._receive(sock)
                    elif mask & selectors.EVENT_WRITE:
                        self._send(sock)
        finally:
            with self._lock:
                self._serving = False
            self._close_all()

    def shutdown(self) -> None:
        """Stop the loop and close every socket."""
        with self._lock:
            self._stopping = True
            serving = self._serving
        if serving:
            try:
                self._wake_writer.send(b"\0")
            except OSError:
                pass
        else:
            self._close_all()

    def _drain_waker(self) -> None:
        try:
            self._wake_reader.recv(_CHUNK)
        except OSError:
            pass

    def _accept(self) -> None:
        try:
            client, _ = self._listener.accept()
        except OSError:
            return
        if self._stopping:
            client.close()
            return
        try:
            client.setblocking(False)
        except OSError:
            print("Socket could not be set to nonblocking mode.", file=sys.stderr)
            client.close()
            return
        self._clients[client] = _Client()
        self._selector.register(client, selectors.EVENT_READ)

    def _drop(self, sock: socket.socket) -> None:
        self._clients.pop(sock, None)
        try:
            self._selector.unregister(sock)
        except (KeyError, ValueError):
            pass
        sock.close()

    def _receive(self, sock: socket.socket) -> None:
        client = self._clients[sock]
        try:
            data = sock.recv(_CHUNK)
        except (BlockingIOError, InterruptedError):
            return
        except OSError:
            data = b""
        if not data:
            self._drop(sock)
            return
        request = client.reader.feed(data.decode(_ENCODING))
        if request is None:
            return
        reply = handle_request(request, self._cache)
        client.outgoing = reply.encode(_ENCODING, errors="replace")
        self._selector.modify(sock, selectors.EVENT_WRITE)

    def _send(self, sock: socket.socket) -> None:
        client = self._clients[sock]
        try:
            sent = sock.send(client.outgoing)
        except (BlockingIOError, InterruptedError):
            return
        except OSError:
            print("Sending response to client failed.", file=sys.stderr)
            client.outgoing = b""
            sent = 0
        client.outgoing = client.outgoing[sent:]
        if not client.outgoing:
            client.reader.reset()
            self._selector.modify(sock, selectors.EVENT_READ)

    def _close_all(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        for sock in list(self._clients):
            self._drop(sock)
        self._selector.close()
        for sock in (self._listener, self._wake_reader, self._wake_writer):
            sock.close()


def main(argv: Optional[list[str]] = None) -> int:
    """Run the server until interrupted."""
    parser = argparse.ArgumentParser(prog="redis-server", description="Minimal RESP key/value server.")
    parser.add_argument("--host", default="0.0.0.0", help="address to bind (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=6379, help="port to bind (default: 6379)")
    args = parser.parse_args(argv)

    try:
        server = RedisServer(args.host, args.port)
    except OSError as exc:
        print(f"Error binding socket to port: {exc}", file=sys.stderr)
        return 1

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.shutdown()
    return 0