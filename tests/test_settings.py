# tests/test_settings.py
import pytest
from config.settings import ConfigError, Settings

REQUIRED_ENV = {
    "IMAP_SERVER": "imap.example.com",
    "IMAP_USERNAME": "user@example.com",
    "IMAP_PASSWORD": "secret",
}


def test_defaults_from_environment():
    s = Settings.from_sources([], REQUIRED_ENV)
    assert s.imap_server == "imap.example.com"
    assert s.imap_mailbox == "INBOX"
    assert s.listen_address == ":9117"
    assert s.metrics_endpoint == "/metrics"
    assert s.log_level == "INFO"


def test_flag_wins_over_environment():
    env = dict(REQUIRED_ENV, IMAP_MAILBOX="Archive")
    s = Settings.from_sources(["--imap.mailbox", "Sent", "--imap.server=other.example.com:143"], env)
    assert s.imap_mailbox == "Sent"
    assert s.imap_server == "other.example.com:143"


def test_environment_used_when_flag_absent():
    env = dict(REQUIRED_ENV, LISTEN_ADDRESS="127.0.0.1:9200", METRICS_ENDPOINT="/probe")
    s = Settings.from_sources([], env)
    assert s.listen_host_port() == ("127.0.0.1", 9200)
    assert s.metrics_endpoint == "/probe"


def test_empty_mailbox_resolves_to_inbox():
    env = dict(REQUIRED_ENV, IMAP_MAILBOX="")
    assert Settings.from_sources([], env).imap_mailbox == "INBOX"
    assert Settings.from_sources(["--imap.mailbox="], REQUIRED_ENV).imap_mailbox == "INBOX"


@pytest.mark.parametrize("missing, label", [
    ("IMAP_SERVER", "server"),
    ("IMAP_USERNAME", "username"),
    ("IMAP_PASSWORD", "password"),
])
def test_missing_required_setting(missing, label):
    env = {k: v for k, v in REQUIRED_ENV.items() if k != missing}
    with pytest.raises(ConfigError, match=f"Missing IMAP {label} configuration"):
        Settings.from_sources([], env)


def test_required_setting_from_flags_only():
    s = Settings.from_sources(
        ["--imap.server", "mail", "--imap.username", "u", "--imap.password", "p"], {}
    )
    assert (s.imap_server, s.imap_username, s.imap_password) == ("mail", "u", "p")


def test_imap_port_defaults_to_imaps():
    s = Settings.from_sources([], REQUIRED_ENV)
    assert s.imap_host_port() == ("imap.example.com", 993)


def test_imap_ipv6_literal():
    env = dict(REQUIRED_ENV, IMAP_SERVER="[::1]:1993")
    assert Settings.from_sources([], env).imap_host_port() == ("::1", 1993)


def test_listen_address_without_host_binds_all_interfaces():
    s = Settings.from_sources([], REQUIRED_ENV)
    assert s.listen_host_port() == ("", 9117)


@pytest.mark.parametrize("address", ["9117", ":http", "host:70000"])
def test_invalid_listen_address(address):
    env = dict(REQUIRED_ENV, LISTEN_ADDRESS=address)
    with pytest.raises(ConfigError):
        Settings.from_sources([], env)


def test_metrics_endpoint_gets_leading_slash():
    s = Settings.from_sources(["--metrics.endpoint", "metrics"], REQUIRED_ENV)
    assert s.metrics_endpoint == "/metrics"


def test_log_level_is_validated():
    assert Settings.from_sources(["--log.level", "debug"], REQUIRED_ENV).log_level == "DEBUG"
    with pytest.raises(ConfigError):
        Settings.from_sources(["--log.level", "loud"], REQUIRED_ENV)
