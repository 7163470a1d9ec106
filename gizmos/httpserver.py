"""A small threaded HTTP server that serves plain-text files from a directory."""

from __future__ import annotations

import os
import socket
import sys
import threading
from functools import partial
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, Union

from gizmos.threadpool import ThreadPool

_BACKLOG = 10
_WORKERS = 10
_CHUNK = 512
_POLL_INTERVAL = 0.2


class _Outcome(NamedTuple):
    method: str
    path: str
    status: str
    body: bytes


def _split_request(request: str) -> tuple[str, str]:
    """Return the method and the requested path without its leading slash."""
    space = request.find(" ")
    if space == -1:
        return request, ""
    method = request[:space]
    start = space + 2
    if start < len(request) and request[start] == " ":
        return method, ""
    end = request.find(" ", start)
    return method, request[start:] if end == -1 else request[start:end]


def _exists(path: Path) -> bool:
    try:
        return path.exists()
    except (OSError, ValueError):
        return False


def _inside(path: Path, directory: Path) -> bool:
    try:
        relative = os.path.relpath(path.resolve(), directory.resolve())
    except (OSError, ValueError):
        return False
    return len(relative) == 1 or not relative.startswith("..")


def _read_lines(path: Path) -> bytes:
    if path.is_dir():
        return b""
    try:
        data = path.read_bytes()
    except OSError:
        return b""
    lines = data.split(b"\n")
    if lines[-1] == b"":
        lines.pop()
    return b"".join(line + b"\n" for line in lines)


def _outcome(request: str, directory: Path) -> _Outcome:
    method, raw_path = _split_request(request)
    target = directory / raw_path.split("?", 1)[0]
    valid = method == "GET" and _exists(target) and _inside(target, directory)

    if valid:
        status = "200 OK"
    elif method == "GET":
        status = "404 Not Found"
    else:
        status = "405 Method Not Allowed"

    body = _read_lines(target) if valid else b""
    return _Outcome(method, raw_path, status, body)


def _render(outcome: _Outcome) -> bytes:
    head = (
        f"HTTP/1.1 {outcome.status}\r\n"
        "Content-Type: text/plain\r\n"
        f"Content-Length: {len(outcome.body)}\r\n\r\n"
    )
    return head.encode("latin-1") + outcome.body


def build_response(request: str, directory: Union[str, Path]) -> bytes:
    """Return the full HTTP response for a raw request served from directory."""
    return _render(_outcome(request, Path(directory)))


class FileServer:
    """Serves files below a directory; only GET is allowed."""

    def __init__(
        self,
        port: int,
        directory: Union[str, Path] = ".",
        host: str = "0.0.0.0",
        workers: int = _WORKERS,
    ) -> None:
        self.directory = Path.cwd() if str(directory) == "." else Path(directory)
        if not self.directory.exists():
            raise FileNotFoundError(f"{self.directory} doesn't exist")

        self._workers = workers
        self._slots = threading.Semaphore(workers)
        self._stop = threading.Event()
        self._clients: set[socket.socket] = set()
        self._clients_lock = threading.Lock()

        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._listener.bind((host, port))
            self._listener.listen(_BACKLOG)
            self._listener.settimeout(_POLL_INTERVAL)
        except OSError:
            self._listener.close()
            raise
        self.address: tuple[str, int] = self._listener.getsockname()

    def serve_forever(self) -> None:
        """Accept connections and answer them until shut down."""
        pool = ThreadPool(self._workers)
        try:
            while not self._stop.is_set():
                try:
                    client, address = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break
                if self._stop.is_set():
                    client.close()
                    break
                client.settimeout(None)
                self._slots.acquire()
                pool.submit(partial(self._handle, client, address[0]))
        finally:
            self.shutdown()
            pool.shutdown()

    def shutdown(self) -> None:
        """Stop accepting and cut off every client still connected."""
        self._stop.set()
        self._listener.close()
        with self._clients_lock:
            for client in self._clients:
                try:
                    client.shutdown(socket.SHUT_RDWR)
                except OSError:
                    pass
                client.close()
            self._clients.clear()

    def _handle(self, client: socket.socket, client_ip: str) -> None:
        with self._clients_lock:
            self._clients.add(client)
        try:
            try:
                data = client.recv(_CHUNK)
            except OSError:
                data = b""
            request = data.decode("latin-1").split("\0", 1)[0]
            outcome = _outcome(request, self.directory)
            if request:
                print(
                    f"{client_ip}: {outcome.method} /{outcome.path} [{outcome.status}]",
                    flush=True,
                )
            try:
                client.sendall(_render(outcome))
            except OSError:
                pass
        finally:
            client.close()
            with self._clients_lock:
                self._clients.discard(client)
            self._slots.release()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Serve a directory over HTTP until interrupted."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: http-server <port> <path>")
        return 0

    try:
        port = int(args[0])
    except ValueError:
        print(f"Invalid port: {args[0]}", file=sys.stderr)
        return 1

    try:
        server = FileServer(port, args[1])
    except FileNotFoundError:
        print(f"{args[1]} doesn't exist, server failed to start.", file=sys.stderr)
        return 1
    except OSError:
        print("Failed to bind to specified port.", file=sys.stderr)
        return 1

    print(
        f"Serving HTTP on port {port} (http://0.0.0.0:{port}/) \n"
        f"Directory: {server.directory}\n",
        flush=True,
    )
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("Keyboard interrupt received, exiting.")
    finally:
        server.shutdown()
    return 0