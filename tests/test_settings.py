import pytest

from marketpay.domain.errors import ConfigurationError
from marketpay.utils.settings import load_settings


def test_missing_secrets_fail_fast(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("STRIPE_WEBHOOK_SECRET", raising=False)

    with pytest.raises(ConfigurationError) as exc:
        load_settings()

    assert "STRIPE_SECRET_KEY" in str(exc.value)
    assert "STRIPE_WEBHOOK_SECRET" in str(exc.value)


def test_empty_secret_counts_as_missing(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "")
    with pytest.raises(ConfigurationError):
        load_settings()


def test_loads_from_environment(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_x")
    monkeypatch.setenv("STRIPE_WEBHOOK_SECRET", "whsec_x")
    monkeypatch.setenv("APP_URL", "https://shop.test/")
    monkeypatch.setenv("CURRENCY", "EUR")

    settings = load_settings()

    assert settings.stripe_secret_key == "sk_test_x"
    assert settings.app_url == "https://shop.test"
    assert settings.currency == "eur"
