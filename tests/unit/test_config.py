"""Tests for verifier settings — env-driven via pydantic-settings."""

from __future__ import annotations

import json

import pytest

from pluginseal.config import SealConfig
from pluginseal.models.verification import SignatureAlgorithm

PEM = "-----BEGIN PUBLIC KEY-----\nAAAA\n-----END PUBLIC KEY-----\n"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "ENVIRONMENT", "LOG_LEVEL", "DEBUG", "ALGORITHM",
        "STRICT_MODE", "ALLOW_SELF_SIGNED", "TRUSTED_PUBLIC_KEYS",
    ):
        monkeypatch.delenv(f"PLUGINSEAL_{var}", raising=False)


class TestSealConfig:
    def test_defaults(self):
        config = SealConfig(_env_file=None)
        assert config.environment == "development"
        assert config.log_level == "INFO"
        assert config.algorithm is SignatureAlgorithm.RS256
        assert config.strict_mode is True
        assert config.allow_self_signed is False
        assert config.trusted_public_keys == {}

    def test_is_production(self):
        assert SealConfig(_env_file=None).is_production is False
        assert SealConfig(_env_file=None, environment="production").is_production is True

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PLUGINSEAL_ALGORITHM", "ES256")
        monkeypatch.setenv("PLUGINSEAL_STRICT_MODE", "false")
        monkeypatch.setenv("PLUGINSEAL_TRUSTED_PUBLIC_KEYS", json.dumps({"com.acme": PEM}))

        config = SealConfig(_env_file=None)
        assert config.algorithm is SignatureAlgorithm.ES256
        assert config.strict_mode is False
        assert config.trusted_public_keys == {"com.acme": PEM}

    def test_reads_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "PLUGINSEAL_ENVIRONMENT=staging\nPLUGINSEAL_ALLOW_SELF_SIGNED=true\n",
            encoding="utf-8",
        )
        config = SealConfig(_env_file=env_file)
        assert config.environment == "staging"
        assert config.allow_self_signed is True

    def test_to_verifier_config(self):
        settings = SealConfig(
            _env_file=None,
            algorithm="ES256",
            strict_mode=False,
            trusted_public_keys={"com.acme": PEM},
        )
        config = settings.to_verifier_config()
        assert config.algorithm is SignatureAlgorithm.ES256
        assert config.strict_mode is False
        assert config.trusted_public_keys == {"com.acme": PEM}
        assert config.trusted_public_keys is not settings.trusted_public_keys
