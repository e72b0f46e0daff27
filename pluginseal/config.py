"""Verifier settings — env-driven via pydantic-settings.

Reads from a ``.env`` file and ``PLUGINSEAL_*`` environment variables.
Trusted keys are supplied as a JSON object::

    export PLUGINSEAL_ALGORITHM=ES256
    export PLUGINSEAL_STRICT_MODE=true
    export PLUGINSEAL_TRUSTED_PUBLIC_KEYS='{"com.acme": "-----BEGIN PUBLIC KEY-----\\n..."}'
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from pluginseal.models.verification import SignatureAlgorithm, VerifierConfig


class SealConfig(BaseSettings):
    """Process configuration for plugin signature verification.

    Examples
    --------
    Override via environment::

        export PLUGINSEAL_ENVIRONMENT=production
        export PLUGINSEAL_LOG_LEVEL=DEBUG

    Or via .env file::

        PLUGINSEAL_ENVIRONMENT=staging
        PLUGINSEAL_ALLOW_SELF_SIGNED=true
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PLUGINSEAL_",
        env_file_encoding="utf-8",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"
    debug: bool = False

    # Verification policy
    algorithm: SignatureAlgorithm = SignatureAlgorithm.RS256
    strict_mode: bool = True
    allow_self_signed: bool = False

    # Publisher id -> PEM public key
    trusted_public_keys: dict[str, str] = {}

    @property
    def is_production(self) -> bool:
        """Whether running in production mode."""
        return self.environment == "production"

    def to_verifier_config(self) -> VerifierConfig:
        return VerifierConfig(
            trusted_public_keys=dict(self.trusted_public_keys),
            algorithm=self.algorithm,
            strict_mode=self.strict_mode,
            allow_self_signed=self.allow_self_signed,
        )
