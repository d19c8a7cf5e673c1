# infrastructure/email/imap_client.py
from __future__ import annotations
import logging
import ssl
from imapclient import IMAPClient
from imapclient.exceptions import IMAPClientError

logger = logging.getLogger(__name__)


class IMAPStateError(IMAPClientError):
    pass


def insecure_ssl_context() -> ssl.SSLContext:
    # sin verificación de certificado ni de hostname
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class IMAPMailbox:
    """
    Sesión IMAP de un solo uso sobre TLS.
    Uso:
        with IMAPMailbox(host, port, user, password) as mailbox:
            count = mailbox.message_count("INBOX")
    Al salir siempre se intenta LOGOUT; un fallo al cerrar se registra pero no se propaga.
    """
    def __init__(self, host: str, port: int, user: str, password: str) -> None:
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.client: IMAPClient | None = None

    def __enter__(self) -> "IMAPMailbox":
        self.client = IMAPClient(self.host, port=self.port, ssl=True, ssl_context=insecure_ssl_context())
        try:
            self._require_not_authenticated()
            self.client.login(self.user, self.password)
        except BaseException:
            self.close()
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _require_not_authenticated(self) -> None:
        assert self.client
        # un saludo PREAUTH (o cualquier otro que no sea OK) deja la sesión fuera de estado para LOGIN
        welcome = self.client.welcome or b""
        if isinstance(welcome, str):
            welcome = welcome.encode("ascii", "replace")
        if not welcome.upper().startswith(b"* OK"):
            raise IMAPStateError("IMAP server in wrong state for Login!")

    def message_count(self, folder: str) -> int:
        assert self.client
        status = self.client.select_folder(folder, readonly=True)
        return int(status.get(b"EXISTS", 0))

    def close(self) -> None:
        client, self.client = self.client, None
        if client is None:
            return
        try:
            client.logout()
        except Exception:
            logger.warning("Error cerrando sesión IMAP con %s", self.host, exc_info=True)
            try:
                client.shutdown()
            except Exception:
                logger.debug("Error cerrando el socket IMAP", exc_info=True)
