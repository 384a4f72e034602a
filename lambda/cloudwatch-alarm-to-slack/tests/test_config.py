import pytest

import config


def test_validate_passes_with_webhook(monkeypatch):
    monkeypatch.setattr(config, "WEBHOOK", "AQICAHh=")
    config.validate()


def test_validate_fails_without_webhook(monkeypatch):
    monkeypatch.setattr(config, "WEBHOOK", "")
    with pytest.raises(config.ConfigurationError, match="Missing environment variable: webhook"):
        config.validate()
