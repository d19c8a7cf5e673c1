# interface_adapters/metrics/mailbox_exporter.py
from __future__ import annotations
from typing import Iterator, Protocol
from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector
from domain.models import MailboxState

NAMESPACE = "imap"
LABELS = ["mailbox", "username"]


class StateSource(Protocol):
    def collect(self) -> MailboxState: ...


class MailboxExporter(Collector):
    """Collector de prometheus_client: un scrape = una consulta IMAP."""

    def __init__(self, source: StateSource, mailbox: str, username: str) -> None:
        self.source = source
        self.label_values = [mailbox, username]

    def _families(self) -> tuple[GaugeMetricFamily, GaugeMetricFamily]:
        up = GaugeMetricFamily(f"{NAMESPACE}_up", "IMAP server is accessible and up", labels=LABELS)
        messages = GaugeMetricFamily(
            f"{NAMESPACE}_messages", "Current number of messages in mailbox", labels=LABELS
        )
        return up, messages

    def describe(self) -> Iterator[Metric]:
        # sin muestras: evita una conexión IMAP al registrar
        yield from self._families()

    def collect(self) -> Iterator[Metric]:
        state = self.source.collect()
        up, messages = self._families()
        up.add_metric(self.label_values, float(state.up))
        messages.add_metric(self.label_values, state.messages)
        yield messages
        yield up
