"""A minimal TCP greeting exchange that can run as either server or client."""

from __future__ import annotations

import socket
import sys
import threading
import time
from typing import Optional, Sequence

_CHUNK = 1024
_POLL_INTERVAL = 0.2
_GREETING = "Hello Socket!"
_FAREWELL = "Bye Socket!"
_USAGE = "Usage: hello-socket <server/client> <IPv4> <port>"


def _decode(data: bytes) -> str:
    """Decode received bytes, stopping at the first NUL as a C string would."""
    return data.decode("utf-8", errors="replace").split("\0", 1)[0]


def _open_socket() -> socket.socket:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    except OSError:
        sock.close()
        raise
    return sock


class HelloServer:
    """Answers every client's message with a farewell, one thread per client."""

    def __init__(self, host: str, port: int, connections: int = 3) -> None:
        self._stop = threading.Event()
        self._listener = _open_socket()
        try:
            self._listener.bind((host, port))
            self._listener.listen(connections)
            self._listener.settimeout(_POLL_INTERVAL)
        except OSError:
            self._listener.close()
            raise
        self.address: tuple[str, int] = self._listener.getsockname()

    def serve_forever(self) -> None:
        """Accept clients until shut down, then wait for their handlers."""
        if self._stop.is_set():
            return
        print(f"Server is up and listening on port {self.address[1]}.", flush=True)
        handlers: list[threading.Thread] = []
        try:
            while not self._stop.is_set():
                try:
                    client, _ = self._listener.accept()
                except socket.timeout:
                    continue
                except OSError:
                    break
                if self._stop.is_set():
                    client.close()
                    break
                client.settimeout(None)
                handler = threading.Thread(target=self._handle, args=(client,), daemon=True)
                handler.start()
                handlers.append(handler)
        finally:
            for handler in handlers:
                handler.join()
            self._listener.close()

    def shutdown(self) -> None:
        """Stop accepting new clients and close the listening socket."""
        self._stop.set()
        self._listener.close()

    @staticmethod
    def _handle(client: socket.socket) -> None:
        with client:
            try:
                data = client.recv(_CHUNK)
            except OSError:
                data = b""
            print(f"Received from Client: {_decode(data)}", flush=True)
            try:
                client.sendall(_FAREWELL.encode("utf-8"))
            except OSError:
                pass


def run_client(host: str, port: int, delay: float = 5.0) -> str:
    """Send a greeting, wait ``delay`` seconds and return the server's reply."""
    with _open_socket() as sock:
        try:
            sock.connect((host, port))
        except OSError as exc:
            raise ConnectionError("Error connecting to server.") from exc
        sock.sendall(_GREETING.encode("utf-8"))
        if delay > 0:
            time.sleep(delay)
        reply = _decode(sock.recv(_CHUNK))
    print(f"Received from Server: {reply}", flush=True)
    return reply


def _parse_port(text: str) -> Optional[int]:
    try:
        port = int(text)
    except ValueError:
        return None
    return port if 0 <= port <= 0xFFFF else None


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run as server or client depending on the first argument."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 3 or args[0] not in ("server", "client"):
        print(_USAGE)
        return 0

    mode, host, port_text = args
    port = _parse_port(port_text)
    if port is None:
        print(f"Invalid port: {port_text}", file=sys.stderr)
        return 1

    if mode == "server":
        try:
            server = HelloServer(host, port)
        except OSError:
            print("Error binding to the socket.", file=sys.stderr)
            return 1
        try:
            server.serve_forever()
        except KeyboardInterrupt:
            pass
        finally:
            server.shutdown()
        return 0

    try:
        run_client(host, port)
    except ConnectionError as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    return 0