"""Configuration hierarchy and the notification channels."""

import pytest

from hirepath.core.config.loader import ConfigLoader
from hirepath.integrations.notifier import LoggingNotifier, SmtpNotifier, get_notifier, is_valid_email


def test_defaults_and_environment_file(config):
    assert config["lifecycle"]["invite_threshold"] == 80.0
    assert config["resume"]["max_size_mb"] == 5
    assert config["assessment"]["seed"] == 7
    assert config["retry"]["wait_max"] == 0
    assert config["storage"]["object_store_dir"].endswith("store")


def test_env_vars_override_nested_keys(monkeypatch):
    monkeypatch.setenv("HIREPATH_ENV", "test")
    monkeypatch.setenv("HIREPATH_LIFECYCLE__INVITE_THRESHOLD", "85.5")
    monkeypatch.setenv("HIREPATH_LIFECYCLE__AUTO_INVITE", "false")
    monkeypatch.setenv("HIREPATH_ASSESSMENT__ENGINE", "openai")

    config = ConfigLoader().load()
    assert config["lifecycle"]["invite_threshold"] == 85.5
    assert config["lifecycle"]["auto_invite"] is False
    assert config["assessment"]["engine"] == "openai"


def test_overrides_merge_deeply(tmp_path, monkeypatch):
    monkeypatch.delenv("HIREPATH_ENV", raising=False)
    (tmp_path / "default.yaml").write_text("storage:\n  object_store_dir: a\n  blob_dir: b\n")
    config = ConfigLoader(tmp_path).load(overrides={"storage": {"blob_dir": "c"}})
    assert config["storage"] == {"object_store_dir": "a", "blob_dir": "c"}


@pytest.mark.parametrize(
    "value,valid",
    [("ada@example.com", True), ("Ada <ada@example.com>", True), ("nope", False), ("", False), (None, False)],
)
def test_email_validation(value, valid):
    assert is_valid_email(value) is valid


def test_logging_notifier_reports_success():
    assert LoggingNotifier().notify("c1", {"to": "ada@example.com", "subject": "hi"}) is True


def test_get_notifier_picks_channel(monkeypatch):
    assert isinstance(get_notifier({}), LoggingNotifier)

    for key, value in {
        "SMTP_HOST": "smtp.example.com",
        "SMTP_USER": "bot",
        "SMTP_PASSWORD": "secret",
        "SMTP_FROM": "bot@example.com",
    }.items():
        monkeypatch.setenv(key, value)
    assert isinstance(get_notifier({"notifications": {"channel": "smtp"}}), SmtpNotifier)


def test_smtp_notifier_rejects_bad_address(monkeypatch):
    monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
    monkeypatch.setenv("SMTP_USER", "bot")
    monkeypatch.setenv("SMTP_PASSWORD", "secret")
    monkeypatch.setenv("SMTP_FROM", "bot@example.com")
    notifier = get_notifier({"notifications": {"channel": "smtp"}})
    assert notifier.notify("c1", {"to": "not-an-email"}) is False
