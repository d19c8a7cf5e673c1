# application/services/mailbox_collector.py
from __future__ import annotations
import logging
from typing import Callable
from config.settings import Settings
from domain.models import MailboxState
from infrastructure.email.imap_client import IMAPMailbox

logger = logging.getLogger(__name__)

MailboxFactory = Callable[[str, int, str, str], IMAPMailbox]


class MailboxCollector:
    """
    Consulta el buzón configurado en cada llamada: conecta, hace login, selecciona en solo lectura
    y lee el número de mensajes. Cualquier fallo se traduce en MailboxState.down(); no hay reintentos.
    """
    def __init__(self, settings: Settings, mailbox_factory: MailboxFactory = IMAPMailbox) -> None:
        self.host, self.port = settings.imap_host_port()
        self.username = settings.imap_username
        self.password = settings.imap_password
        self.mailbox = settings.imap_mailbox
        self.mailbox_factory = mailbox_factory

    def collect(self) -> MailboxState:
        try:
            with self.mailbox_factory(self.host, self.port, self.username, self.password) as session:
                count = session.message_count(self.mailbox)
        except Exception as exc:
            logger.error("Fallo consultando %s:%s buzón=%s: %s", self.host, self.port, self.mailbox, exc)
            logger.debug("Detalle del fallo IMAP", exc_info=True)
            return MailboxState.down()

        logger.debug("Buzón %s: %d mensajes", self.mailbox, count)
        return MailboxState(up=1, messages=float(count))
