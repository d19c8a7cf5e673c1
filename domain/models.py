# domain/models.py
from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True)
class MailboxState:
    """Resultado de un scrape: servidor accesible (1/0) y número de mensajes del buzón."""
    up: int = 0
    messages: float = 0.0

    @classmethod
    def down(cls) -> "MailboxState":
        return cls(up=0, messages=0.0)
