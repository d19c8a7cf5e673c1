# config/settings.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping, Sequence
import argparse
import os
from dotenv import load_dotenv

IMAPS_PORT = 993

# (flag, variable de entorno, valor por defecto); None = obligatorio
_SOURCES: dict[str, tuple[str, str, str | None]] = {
    "imap_server": ("imap.server", "IMAP_SERVER", None),
    "imap_username": ("imap.username", "IMAP_USERNAME", None),
    "imap_password": ("imap.password", "IMAP_PASSWORD", None),
    "imap_mailbox": ("imap.mailbox", "IMAP_MAILBOX", "INBOX"),
    "listen_address": ("listen.address", "LISTEN_ADDRESS", ":9117"),
    "metrics_endpoint": ("metrics.endpoint", "METRICS_ENDPOINT", "/metrics"),
    "log_level": ("log.level", "LOG_LEVEL", "INFO"),
}

_HELP = {
    "imap_server": "IMAP server to query (host or host:port)",
    "imap_username": "IMAP username for login",
    "imap_password": "IMAP password for login",
    "imap_mailbox": "IMAP mailbox to query",
    "listen_address": "Address to listen on for HTTP requests",
    "metrics_endpoint": "Path under which to expose metrics",
    "log_level": "Logging level",
}

_REQUIRED_LABELS = {
    "imap_server": "server",
    "imap_username": "username",
    "imap_password": "password",
}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class ConfigError(ValueError):
    pass


def _split_host_port(value: str, default_port: int | None) -> tuple[str, int]:
    host, port = value, ""
    if value.startswith("["):
        # literal IPv6: [::1]:993
        end = value.find("]")
        if end == -1:
            raise ConfigError(f"Dirección inválida: {value!r}")
        host, rest = value[1:end], value[end + 1:]
        if rest:
            if not rest.startswith(":"):
                raise ConfigError(f"Dirección inválida: {value!r}")
            port = rest[1:]
    elif value.count(":") == 1:
        host, port = value.split(":")

    if not port:
        if default_port is None:
            raise ConfigError(f"Falta el puerto en {value!r}")
        return host, default_port
    try:
        number = int(port)
    except ValueError:
        raise ConfigError(f"Puerto inválido en {value!r}") from None
    if not 0 <= number <= 65535:
        raise ConfigError(f"Puerto fuera de rango en {value!r}")
    return host, number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imap-mailbox-exporter",
        description="Prometheus exporter for the message count of an IMAP mailbox.",
    )
    for field, (flag, env, default) in _SOURCES.items():
        suffix = f" (env {env}" + (f", default {default})" if default else ", required)")
        parser.add_argument(f"--{flag}", dest=field, default=None, help=_HELP[field] + suffix)
    return parser


@dataclass(frozen=True)
class Settings:
    imap_server: str
    imap_username: str
    imap_password: str
    imap_mailbox: str = "INBOX"
    listen_address: str = ":9117"
    metrics_endpoint: str = "/metrics"
    log_level: str = "INFO"

    @classmethod
    def from_sources(
        cls,
        argv: Sequence[str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> "Settings":
        """
        Resuelve la configuración: flag (si se pasa) > variable de entorno > valor por defecto.
        Un valor vacío cae al defecto. Lanza ConfigError si falta server/username/password.
        """
        if environ is None:
            load_dotenv()
            environ = os.environ
        args = build_parser().parse_args(argv)

        values: dict[str, str] = {}
        for field, (_flag, env, default) in _SOURCES.items():
            flag_value = getattr(args, field)
            value = flag_value if flag_value is not None else environ.get(env, "")
            if not value:
                if default is None:
                    raise ConfigError(f"Missing IMAP {_REQUIRED_LABELS[field]} configuration")
                value = default
            values[field] = value

        values["log_level"] = values["log_level"].upper()
        if values["log_level"] not in _LOG_LEVELS:
            raise ConfigError(f"Nivel de log desconocido: {values['log_level']!r}")

        endpoint = values["metrics_endpoint"]
        if not endpoint.startswith("/"):
            values["metrics_endpoint"] = "/" + endpoint

        settings = cls(**values)
        # valida direcciones al arrancar, no en el primer scrape
        settings.imap_host_port()
        settings.listen_host_port()
        return settings

    # ───────── helpers ─────────
    def imap_host_port(self) -> tuple[str, int]:
        return _split_host_port(self.imap_server, IMAPS_PORT)

    def listen_host_port(self) -> tuple[str, int]:
        return _split_host_port(self.listen_address, None)
