"""Verifier configuration and verification result models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SignatureAlgorithm(str, Enum):
    """Signature schemes a verifier can be configured with.

    * ``RS256`` — RSASSA-PKCS1-v1_5 with SHA-256.
    * ``ES256`` — ECDSA on P-256 with SHA-256.
    """

    RS256 = "RS256"
    ES256 = "ES256"


class VerifierConfig(BaseModel):
    """Caller-supplied verifier configuration.

    The algorithm applies to every verification performed by the verifier
    built from this config.  Any algorithm other than ``RS256`` or ``ES256``
    fails validation.

    Examples
    --------
    >>> cfg = VerifierConfig(algorithm="ES256", strict_mode=True)
    >>> cfg.algorithm is SignatureAlgorithm.ES256
    True
    >>> cfg.allow_self_signed
    False
    """

    model_config = ConfigDict(frozen=True)

    trusted_public_keys: dict[str, str] = Field(default_factory=dict)
    algorithm: SignatureAlgorithm
    strict_mode: bool
    allow_self_signed: bool = False


class VerificationResult(BaseModel):
    """Outcome of a single, non-fatal verification.

    ``verified`` is authoritative.  ``publisher_id`` is set whenever the
    publisher could be extracted from the plugin name, ``algorithm`` only on
    success.  ``signed_at`` is reserved for signature payloads that carry a
    timestamp and is never populated by the base verifier.
    """

    model_config = ConfigDict(frozen=True)

    verified: bool
    error: str | None = None
    publisher_id: str | None = None
    algorithm: str | None = None
    signed_at: datetime | None = None
