import http.client
import logging
import socket
import threading
from unittest.mock import MagicMock
from wsgiref.util import setup_testing_defaults

import pytest
from prometheus_client import CollectorRegistry

from temperature_exporter.outputs.http_server import (
    build_server,
    make_exporter_app,
    parse_listen_address,
    server_class_for,
    with_request_logging,
)
from temperature_exporter.telemetry import TemperatureCollector


def call(app, path, method="GET"):
    environ = {"PATH_INFO": path, "REQUEST_METHOD": method, "QUERY_STRING": ""}
    setup_testing_defaults(environ)
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body.decode()


@pytest.fixture
def app():
    registry = CollectorRegistry()
    registry.register(TemperatureCollector())
    return make_exporter_app(registry, metrics_path="/metrics")


def test_metrics_endpoint(app):
    status, headers, body = call(app, "/metrics")
    assert status.startswith("200")
    assert headers["Content-Type"].startswith("text/plain")
    assert "temp_exporter_scrape_duration_seconds" in body


def test_custom_metrics_path():
    registry = CollectorRegistry()
    registry.register(TemperatureCollector(namespace="box"))
    custom = make_exporter_app(registry, metrics_path="/temperatures")

    assert "box_scrape_duration_seconds" in call(custom, "/temperatures")[2]
    assert call(custom, "/metrics")[0].startswith("404")


def test_healthz(app):
    status, _, body = call(app, "/healthz")
    assert status == "200 OK"
    assert body == "ok"


def test_index_lists_paths(app):
    status, _, body = call(app, "/")
    assert status == "200 OK"
    assert "Metrics: /metrics" in body
    assert "Health: /healthz" in body


def test_unknown_path_is_404(app):
    assert call(app, "/favicon.png")[0].startswith("404")


def test_request_logging(app):
    logger = MagicMock(spec=logging.Logger)
    logged = with_request_logging(app, request_logger=logger)

    status, _, _ = call(logged, "/healthz")

    assert status == "200 OK"
    args = logger.info.call_args[0]
    assert args[1:4] == ("GET", "/healthz", "200")


@pytest.mark.parametrize("listen, expected", [
    (":9102", ("", 9102)),
    ("0.0.0.0:9102", ("0.0.0.0", 9102)),
    ("[::1]:9102", ("::1", 9102)),
])
def test_parse_listen_address(listen, expected):
    assert parse_listen_address(listen) == expected


@pytest.mark.parametrize("listen", ["9102", "host:port", ":70000"])
def test_parse_listen_address_rejects(listen):
    with pytest.raises(ValueError):
        parse_listen_address(listen)


def test_build_server_binds_ephemeral_port(app):
    server = build_server(app, "127.0.0.1:0", read_timeout=1.5)
    try:
        assert server.server_address[1] > 0
        assert server.RequestHandlerClass.timeout == 1.5
    finally:
        server.server_close()


@pytest.mark.parametrize("host, family", [
    ("", socket.AF_INET),
    ("0.0.0.0", socket.AF_INET),
    ("::1", socket.AF_INET6),
    ("::", socket.AF_INET6),
])
def test_server_class_matches_address_family(host, family):
    assert server_class_for(host).address_family == family


def _ipv6_loopback_available():
    if not socket.has_ipv6:
        return False
    try:
        with socket.socket(socket.AF_INET6, socket.SOCK_STREAM) as sock:
            sock.bind(("::1", 0))
    except OSError:
        return False
    return True


@pytest.mark.skipif(not _ipv6_loopback_available(), reason="IPv6 loopback not available")
def test_build_server_binds_ipv6_loopback(app):
    server = build_server(app, "[::1]:0")
    try:
        assert server.socket.family == socket.AF_INET6
        assert server.server_address[0] == "::1"
        assert server.server_address[1] > 0
    finally:
        server.server_close()


def test_served_over_socket(app):
    server = build_server(app, "127.0.0.1:0", read_timeout=2.0)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        port = server.server_address[1]
        connection = http.client.HTTPConnection("127.0.0.1", port, timeout=5)
        connection.request("GET", "/healthz")
        response = connection.getresponse()
        assert response.status == 200
        assert response.read() == b"ok"
        connection.close()
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
