"""
http_server.py

WSGI application and threaded HTTP server exposing the metrics endpoint.

Routes:
    <metrics_path>  prometheus_client exposition of the given registry
    /healthz        liveness probe, always "ok"
    /               short plain-text index
"""

import logging
import socket
import time
from socketserver import ThreadingMixIn
from typing import Any, Callable, Iterable
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from temperature_exporter import PACKAGE_LOGGER_NAME

logger = logging.getLogger(f"{PACKAGE_LOGGER_NAME}.http")

WSGIApp = Callable[[dict[str, Any], Callable], Iterable[bytes]]

HEALTH_PATH = "/healthz"
PLAIN_TEXT = [("Content-Type", "text/plain; charset=utf-8")]


def _plain(start_response, status: str, body: str) -> list[bytes]:
    start_response(status, PLAIN_TEXT)
    return [body.encode("utf-8")]


def make_exporter_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> WSGIApp:
    """
    Build the exporter WSGI application.

    Args:
        registry: Registry served on ``metrics_path``.
        metrics_path: Path of the metrics endpoint.
    """
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO") or "/"
        if path == metrics_path:
            return metrics_app(environ, start_response)
        if path == HEALTH_PATH:
            return _plain(start_response, "200 OK", "ok")
        if path == "/":
            return _plain(
                start_response,
                "200 OK",
                f"Temperature Exporter\nMetrics: {metrics_path}\nHealth: {HEALTH_PATH}\n",
            )
        return _plain(start_response, "404 Not Found", "404 page not found\n")

    return app


def with_request_logging(app: WSGIApp, request_logger: logging.Logger = logger) -> WSGIApp:
    """Wrap ``app`` so each request is logged as METHOD PATH -> STATUS (duration)."""

    def logged_app(environ, start_response):
        start = time.perf_counter()
        status_holder = {"status": "200"}

        def capturing_start_response(status, headers, exc_info=None):
            status_holder["status"] = status.split(" ", 1)[0]
            return start_response(status, headers, exc_info)

        body = app(environ, capturing_start_response)
        request_logger.info(
            "%s %s -> %s (%.3fs)",
            environ.get("REQUEST_METHOD", "GET"),
            environ.get("PATH_INFO", "/"),
            status_holder["status"],
            time.perf_counter() - start,
        )
        return body

    return logged_app


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """Thread-per-request WSGI server."""
    daemon_threads = True


class _ThreadingWSGIServerV6(_ThreadingWSGIServer):
    """Thread-per-request WSGI server bound to an IPv6 address."""
    address_family = socket.AF_INET6


class _QuietHandler(WSGIRequestHandler):
    """Request handler that routes wsgiref's access log to debug level."""

    def log_message(self, format, *args):
        logger.debug(format, *args)


def parse_listen_address(listen: str) -> tuple[str, int]:
    """
    Split a listen address such as ":9102", "0.0.0.0:9102" or "[::1]:9102"
    into (host, port). An empty host binds all interfaces.
    """
    host, sep, port = listen.rpartition(":")
    if not sep:
        raise ValueError(f"listen address must be [host]:port, got '{listen}'")
    host = host.strip("[]")
    port_number = int(port)
    if not 0 <= port_number <= 65535:
        raise ValueError(f"port out of range: {port_number}")
    return host, port_number


def server_class_for(host: str) -> type[WSGIServer]:
    """Return the server class whose address family fits ``host``."""
    if ":" in host:
        return _ThreadingWSGIServerV6
    return _ThreadingWSGIServer


def build_server(app: WSGIApp, listen: str, read_timeout: float | None = None) -> WSGIServer:
    """
    Bind a threaded WSGI server for ``app`` on ``listen``. IPv6 hosts such
    as "[::1]:9102" get an AF_INET6 socket.

    The handler's ``timeout`` is ``read_timeout``; wsgiref applies it to the
    connection socket, so it bounds reads and writes alike. Each connection
    carries one request, so there is no idle keep-alive period.

    Raises:
        OSError: The address cannot be bound.
    """
    host, port = parse_listen_address(listen)
    handler_class = type("ExporterRequestHandler", (_QuietHandler,), {"timeout": read_timeout})
    return make_server(host, port, app, server_class=server_class_for(host), handler_class=handler_class)
