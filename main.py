# main.py
# Punto de entrada: configuración -> collector IMAP -> registro Prometheus -> servidor HTTP
from __future__ import annotations
import logging
import sys
from typing import Sequence
from config.settings import ConfigError, Settings
from application.services.mailbox_collector import MailboxCollector
from interface_adapters.metrics.mailbox_exporter import MailboxExporter
from interface_adapters.http.server import build_app, build_registry, make_http_server

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = Settings.from_sources(argv)
    except ConfigError as exc:
        logger.critical("%s", exc)
        return 1

    logging.getLogger().setLevel(settings.log_level)

    collector = MailboxCollector(settings)
    exporter = MailboxExporter(collector, settings.imap_mailbox, settings.imap_username)
    app = build_app(build_registry(exporter), settings.metrics_endpoint)

    host, port = settings.listen_host_port()
    try:
        httpd = make_http_server(app, host, port)
    except OSError:
        logger.exception("No se pudo escuchar en %s", settings.listen_address)
        return 1

    logger.info("IMAP server=%s mailbox=%s username=%s", settings.imap_server, settings.imap_mailbox, settings.imap_username)
    logger.info("Exporter listening on %s", settings.listen_address)
    with httpd:
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            logger.info("Parando exporter")
    return 0


if __name__ == "__main__":
    sys.exit(main())
