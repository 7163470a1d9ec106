import socket
import threading

import pytest

from gizmos.hellosocket import HelloServer, main, run_client


@pytest.fixture
def running_server():
    server = HelloServer("127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, thread
    server.shutdown()
    thread.join(timeout=5)


def _stop(server, thread):
    server.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()


def test_server_replies_with_farewell(running_server):
    server, _ = running_server
    with socket.create_connection(server.address, timeout=5) as sock:
        sock.sendall(b"ping")
        reply = sock.recv(1024)
    assert reply == b"Bye Socket!"


def test_run_client_returns_reply(running_server, capsys):
    server, thread = running_server
    reply = run_client("127.0.0.1", server.address[1], delay=0)
    assert reply == "Bye Socket!"
    _stop(server, thread)
    out = capsys.readouterr().out
    assert "Received from Server: Bye Socket!" in out
    assert "Received from Client: Hello Socket!" in out


def test_several_clients_all_answered(running_server):
    server, _ = running_server
    replies = [run_client("127.0.0.1", server.address[1], delay=0) for _ in range(3)]
    assert replies == ["Bye Socket!"] * 3


def test_run_client_without_server_raises():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    with pytest.raises(ConnectionError):
        run_client("127.0.0.1", port, delay=0)


def test_serve_forever_after_shutdown_returns():
    server = HelloServer("127.0.0.1", 0)
    server.shutdown()
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    thread.join(timeout=5)
    assert not thread.is_alive()


def test_shutdown_stops_running_loop():
    server = HelloServer("127.0.0.1", 0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    server.shutdown()
    thread.join(timeout=5)
    assert not thread.is_alive()


@pytest.mark.parametrize(
    "argv",
    [[], ["server"], ["both", "127.0.0.1", "80"], ["client", "127.0.0.1"]],
)
def test_main_prints_usage(argv, capsys):
    assert main(argv) == 0
    assert "Usage: hello-socket <server/client> <IPv4> <port>" in capsys.readouterr().out


def test_main_rejects_bad_port(capsys):
    assert main(["client", "127.0.0.1", "notaport"]) == 1
    assert "notaport" in capsys.readouterr().err


def test_main_client_reports_connection_failure(capsys):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        port = probe.getsockname()[1]
    assert main(["client", "127.0.0.1", str(port)]) == 1
    assert "Error connecting to server." in capsys.readouterr().err