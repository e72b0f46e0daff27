"""Production configuration guard — no permissive verification in production.

The guard runs once before a verifier is built from settings and fails hard
(raises ``VerifierConfigError``) if the policy would let an unverified
plugin load in production.  All violations are reported together.
"""

from __future__ import annotations

import logging

from pluginseal.config import SealConfig
from pluginseal.core.errors import VerifierConfigError

logger = logging.getLogger(__name__)


def collect_production_violations(config: SealConfig) -> list[str]:
    """Return every production constraint *config* violates.

    Constraints
    -----------
    1. Debug mode must be disabled.
    2. Strict mode must be enabled.
    3. Self-signed allowance must be disabled.
    4. At least one trusted publisher key must be configured.
    """
    violations: list[str] = []

    if config.debug:
        violations.append(
            "debug=True is not allowed in production. "
            "Set PLUGINSEAL_DEBUG=false."
        )
    if not config.strict_mode:
        violations.append(
            "strict_mode=False lets unsigned plugins load in production. "
            "Set PLUGINSEAL_STRICT_MODE=true."
        )
    if config.allow_self_signed:
        violations.append(
            "allow_self_signed=True is a development carve-out. "
            "Set PLUGINSEAL_ALLOW_SELF_SIGNED=false."
        )
    if not config.trusted_public_keys:
        violations.append(
            "No trusted publisher keys configured; every signed plugin would "
            "be rejected. Set PLUGINSEAL_TRUSTED_PUBLIC_KEYS."
        )
    return violations


def enforce_production_constraints(config: SealConfig) -> None:
    """Validate production-critical settings.

    No-op unless ``config.is_production``.

    Raises
    ------
    VerifierConfigError
        If any production constraint is violated.
    """
    if not config.is_production:
        return

    violations = collect_production_violations(config)
    if violations:
        msg = (
            "Production configuration guard failed.\n"
            + "\n".join(f"  - {v}" for v in violations)
        )
        logger.critical(msg)
        raise VerifierConfigError(msg)

    logger.info("Production configuration guard passed.")
