# tests/conftest.py
from __future__ import annotations
from unittest.mock import MagicMock
import pytest
from config.settings import Settings


@pytest.fixture
def settings() -> Settings:
    return Settings(
        imap_server="imap.example.com:993",
        imap_username="user@example.com",
        imap_password="secret",
        imap_mailbox="INBOX",
    )


@pytest.fixture
def imap_client(monkeypatch):
    """Sustituye imapclient.IMAPClient por un mock con saludo OK y 3 mensajes en el buzón."""
    client = MagicMock(name="IMAPClient()")
    client.welcome = b"* OK IMAP4rev1 Service Ready"
    client.select_folder.return_value = {b"EXISTS": 3, b"RECENT": 0, b"READ-ONLY": [b""]}
    factory = MagicMock(name="IMAPClient", return_value=client)
    monkeypatch.setattr("infrastructure.email.imap_client.IMAPClient", factory)
    return factory
