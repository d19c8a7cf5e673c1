# interface_adapters/http/server.py
from __future__ import annotations
import logging
import socket
from typing import Callable, Iterable
from wsgiref.simple_server import ServerHandler, WSGIRequestHandler, make_server
from prometheus_client import CollectorRegistry, GCCollector, PlatformCollector, ProcessCollector, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.registry import Collector

logger = logging.getLogger(__name__)

INDEX_HTML = (
    b"<html><head><title>IMAP mailbox exporter</title></head>"
    b"<body><h1>IMAP mailbox exporter</h1></body></html>"
)

WSGIApp = Callable[[dict, Callable], Iterable[bytes]]


def build_registry(exporter: Collector) -> CollectorRegistry:
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    GCCollector(registry=registry)
    registry.register(exporter)
    return registry


def build_app(registry: CollectorRegistry, metrics_endpoint: str = "/metrics") -> WSGIApp:
    """
    App WSGI: <metrics_endpoint> -> exposición de prometheus_client; cualquier otra ruta -> página HTML.
    Cada petición a métricas dispara la recolección de forma síncrona (sin caché).
    """
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        if environ.get("PATH_INFO", "/") == metrics_endpoint:
            return metrics_app(environ, start_response)
        start_response("200 OK", [
            ("Content-Type", "text/html; charset=utf-8"),
            ("Content-Length", str(len(INDEX_HTML))),
        ])
        return [INDEX_HTML]

    return app


class ExporterServerHandler(ServerHandler):
    """ServerHandler de wsgiref que envía los errores al logging en lugar de a stderr."""

    def log_exception(self, exc_info):
        try:
            logger.error("Error en la aplicación WSGI (%s %s)",
                         self.environ.get("REQUEST_METHOD"), self.environ.get("PATH_INFO"),
                         exc_info=exc_info)
        finally:
            exc_info = None

    def finish_response(self):
        try:
            super().finish_response()
        except (ConnectionAbortedError, BrokenPipeError, ConnectionResetError) as exc:
            # wsgiref descarta estos errores sin registrarlos
            logger.error("Error escribiendo la respuesta a %s: %s", self.environ.get("REMOTE_ADDR"), exc)
            raise


class _LoggingHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    def handle(self):
        self.raw_requestline = self.rfile.readline(65537)
        if len(self.raw_requestline) > 65536:
            self.requestline = ""
            self.request_version = ""
            self.command = ""
            self.send_error(414)
            return
        if not self.parse_request():
            return

        handler = ExporterServerHandler(
            self.rfile, self.wfile, self.get_stderr(), self.get_environ(),
            multithread=True,
        )
        handler.request_handler = self
        handler.run(self.server.get_app())


class ExporterHTTPServer(ThreadingWSGIServer):
    """Un hilo por petición; los errores de una petición se registran sin tumbar el proceso."""

    def handle_error(self, request, client_address):
        logger.exception("Error atendiendo la petición de %s", client_address)


class _IPv6ExporterHTTPServer(ExporterHTTPServer):
    address_family = socket.AF_INET6


def make_http_server(app: WSGIApp, host: str, port: int) -> ExporterHTTPServer:
    """Crea (sin arrancar) el servidor HTTP; main llama a serve_forever()."""
    server_class = _IPv6ExporterHTTPServer if ":" in host else ExporterHTTPServer
    return make_server(host, port, app, server_class=server_class, handler_class=_LoggingHandler)
