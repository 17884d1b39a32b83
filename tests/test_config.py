import pytest
from pydantic import ValidationError

from siwe.config import SiweSettings, load_settings


def test_defaults(monkeypatch):
    for name in (
        "SIWE_DEFAULT_CHAIN_ID",
        "SIWE_NONCE_LENGTH",
        "SIWE_WEB3_PROVIDER_URI",
    ):
        monkeypatch.delenv(name, raising=False)
    assert load_settings() == SiweSettings()
    assert SiweSettings().default_chain_id == "1"
    assert SiweSettings().nonce_length == 11
    assert SiweSettings().provider_uri is None


def test_environment(monkeypatch):
    monkeypatch.setenv("SIWE_DEFAULT_CHAIN_ID", "10")
    monkeypatch.setenv("SIWE_NONCE_LENGTH", "20")
    monkeypatch.setenv("SIWE_WEB3_PROVIDER_URI", "http://localhost:8545")
    settings = load_settings()
    assert settings.default_chain_id == "10"
    assert settings.nonce_length == 20
    assert settings.provider_uri == "http://localhost:8545"


@pytest.mark.parametrize(
    "name,value",
    [("SIWE_DEFAULT_CHAIN_ID", "mainnet"), ("SIWE_NONCE_LENGTH", "4")],
)
def test_invalid_environment(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        load_settings()
