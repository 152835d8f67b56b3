import logging
from pathlib import Path

import pytest

import octyne_client.config as client_config
from octyne_client import (
    ConfigurationError,
    OctyneClient,
    PasswordCredentials,
    TokenCredentials,
)
from octyne_client.logging_setup import configure_third_party_loggers, setup_logging

from fakes import RecordingSession


@pytest.mark.unit
def test_defaults_without_environment() -> None:
    cfg = client_config.get_settings()
    assert cfg.base_url_normalized == "http://localhost:42069"
    assert cfg.request_timeout == 60
    assert cfg.console_open_timeout == 10
    assert cfg.verify_tls is True
    assert cfg.headers_supported is True
    assert cfg.credentials() is None


@pytest.mark.unit
def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCTYNE_URL", "https://octyne.example.test/")
    monkeypatch.setenv("OCTYNE_USERNAME", "admin")
    monkeypatch.setenv("OCTYNE_PASSWORD", "pw")
    monkeypatch.setenv("OCTYNE_REQUEST_TIMEOUT", "0")
    monkeypatch.setenv("OCTYNE_VERIFY_TLS", "false")
    monkeypatch.setenv("OCTYNE_HEADERS_SUPPORTED", "no")

    cfg = client_config.get_settings()
    assert cfg.base_url_normalized == "https://octyne.example.test"
    assert cfg.request_timeout is None
    assert cfg.verify_tls is False
    assert cfg.headers_supported is False
    assert cfg.credentials() == PasswordCredentials(username="admin", password="pw")
    assert "pw" not in repr(cfg)


@pytest.mark.unit
def test_token_wins_over_password_in_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCTYNE_USERNAME", "admin")
    monkeypatch.setenv("OCTYNE_PASSWORD", "pw")
    monkeypatch.setenv("OCTYNE_TOKEN", "env-token")
    assert client_config.get_settings().credentials() == TokenCredentials(token="env-token")


@pytest.mark.unit
def test_settings_are_cached_until_cleared(monkeypatch: pytest.MonkeyPatch) -> None:
    first = client_config.get_settings()
    monkeypatch.setenv("OCTYNE_URL", "http://other.example.test:1234")
    assert client_config.get_settings() is first
    client_config.get_settings.cache_clear()
    assert client_config.get_settings().base_url == "http://other.example.test:1234"


@pytest.mark.unit
@pytest.mark.parametrize("url", ["octyne.example.test", "ftp://octyne.example.test"])
def test_invalid_url_in_environment(monkeypatch: pytest.MonkeyPatch, url: str) -> None:
    monkeypatch.setenv("OCTYNE_URL", url)
    with pytest.raises(ConfigurationError):
        client_config.get_settings()


@pytest.mark.unit
def test_invalid_timeout_falls_back_to_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCTYNE_REQUEST_TIMEOUT", "soon")
    assert client_config.get_settings().request_timeout == 60


@pytest.mark.unit
def test_non_positive_console_timeout_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCTYNE_CONSOLE_OPEN_TIMEOUT", "0")
    with pytest.raises(ConfigurationError):
        client_config.get_settings()


@pytest.mark.unit
def test_client_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OCTYNE_URL", "https://octyne.example.test")
    monkeypatch.setenv("OCTYNE_TOKEN", "env-token")
    monkeypatch.setenv("OCTYNE_REQUEST_TIMEOUT", "15")
    monkeypatch.setenv("OCTYNE_HEADERS_SUPPORTED", "false")

    session = RecordingSession()
    client = OctyneClient.from_env(session=session)
    assert client.endpoint == "https://octyne.example.test"
    assert client.headers_supported is False
    client.get_servers()
    assert session.last["headers"]["Authorization"] == "env-token"
    assert session.last["timeout"] == 15


@pytest.mark.unit
def test_client_from_env_without_credentials() -> None:
    with pytest.raises(ConfigurationError):
        OctyneClient.from_env(session=RecordingSession())


@pytest.fixture
def _clean_octyne_logger():
    logger = logging.getLogger("octyne_client")
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in saved_handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(saved_level)


@pytest.mark.unit
def test_setup_logging_attaches_handlers_once(tmp_path: Path, _clean_octyne_logger: logging.Logger) -> None:
    log_file = tmp_path / "logs" / "octyne.log"
    logger = setup_logging(level="DEBUG", log_file=log_file)
    setup_logging(level="DEBUG", log_file=log_file)

    assert logger is _clean_octyne_logger
    assert logger.level == logging.DEBUG
    file_handlers = [h for h in logger.handlers if getattr(h, "baseFilename", None)]
    assert len(file_handlers) == 1
    console_handlers = [h for h in logger.handlers if type(h) is logging.StreamHandler]
    assert len(console_handlers) == 1

    logging.getLogger("octyne_client.console").debug("hello from the console module")
    for handler in file_handlers:
        handler.flush()
    assert "hello from the console module" in log_file.read_text(encoding="utf-8")


@pytest.mark.unit
def test_setup_logging_level_from_environment(
    monkeypatch: pytest.MonkeyPatch, _clean_octyne_logger: logging.Logger
) -> None:
    monkeypatch.setenv("OCTYNE_LOG_LEVEL", "warning")
    logger = setup_logging(add_console=False)
    assert logger.level == logging.WARNING
    assert logging.getLogger("websockets").level == logging.WARNING


@pytest.mark.unit
def test_third_party_loggers_follow_debug() -> None:
    configure_third_party_loggers(logging.DEBUG)
    assert logging.getLogger("urllib3").level == logging.INFO
    assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING
