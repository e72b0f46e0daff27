"""Runtime capability detection for hashing and signature verification.

The policy engine never sniffs its environment directly.  It asks a
``CapabilityProbe`` whether a strong hash is available and which signature
backends can serve a given algorithm.  ``RuntimeCapabilities`` answers by
checking which modules are importable; ``StaticCapabilities`` answers from
fixed flags and is what tests use to force a branch.
"""

from __future__ import annotations

import hashlib
import importlib.util
import logging
from enum import Enum
from functools import cached_property
from typing import Protocol, runtime_checkable

from pluginseal.models.verification import SignatureAlgorithm

logger = logging.getLogger(__name__)


class BackendKind(str, Enum):
    """The two families of signature backend.

    * ``server`` — the ``cryptography`` library (OpenSSL bindings).
    * ``sandbox`` — the JOSE/WebCrypto-style path through PyJWT.
    """

    SERVER = "server"
    SANDBOX = "sandbox"


# Order of preference used by backend selection.
BACKEND_PREFERENCE: tuple[BackendKind, ...] = (BackendKind.SERVER, BackendKind.SANDBOX)


@runtime_checkable
class CapabilityProbe(Protocol):
    """What the current execution context can do."""

    def has_strong_hash(self) -> bool: ...

    def has_signature_backend(
        self,
        algorithm: SignatureAlgorithm,
        kind: BackendKind | None = None,
    ) -> bool: ...


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


class RuntimeCapabilities:
    """Capability probe backed by import checks.

    Each answer is resolved once, on first use, and cached for the lifetime
    of the probe.
    """

    @cached_property
    def _strong_hash(self) -> bool:
        available = "sha256" in hashlib.algorithms_available
        if not available:
            logger.warning("hashlib does not expose sha256 in this interpreter.")
        return available

    @cached_property
    def _backends(self) -> frozenset[BackendKind]:
        kinds: set[BackendKind] = set()
        if _module_available("cryptography.hazmat.primitives.asymmetric"):
            kinds.add(BackendKind.SERVER)
        if _module_available("jwt") and _jwt_has_crypto():
            kinds.add(BackendKind.SANDBOX)
        logger.debug(
            "Signature backends available: %s",
            sorted(k.value for k in kinds) or "none",
        )
        return frozenset(kinds)

    def has_strong_hash(self) -> bool:
        return self._strong_hash

    def has_signature_backend(
        self,
        algorithm: SignatureAlgorithm,
        kind: BackendKind | None = None,
    ) -> bool:
        # Both backends cover every supported algorithm once importable.
        SignatureAlgorithm(algorithm)
        if kind is None:
            return bool(self._backends)
        return kind in self._backends


def _jwt_has_crypto() -> bool:
    try:
        from jwt.algorithms import has_crypto
    except ImportError:
        return False
    return bool(has_crypto)


class StaticCapabilities:
    """Capability probe with fixed answers.

    Parameters
    ----------
    strong_hash:
        Answer for ``has_strong_hash()``.
    backends:
        Backend kinds reported as available.

    Examples
    --------
    >>> probe = StaticCapabilities(strong_hash=False, backends=())
    >>> probe.has_strong_hash()
    False
    >>> probe.has_signature_backend(SignatureAlgorithm.RS256)
    False
    """

    def __init__(
        self,
        *,
        strong_hash: bool = True,
        backends: tuple[BackendKind, ...] = BACKEND_PREFERENCE,
    ) -> None:
        self._strong_hash = strong_hash
        self._backends = frozenset(BackendKind(k) for k in backends)

    def has_strong_hash(self) -> bool:
        return self._strong_hash

    def has_signature_backend(
        self,
        algorithm: SignatureAlgorithm,
        kind: BackendKind | None = None,
    ) -> bool:
        SignatureAlgorithm(algorithm)
        if kind is None:
            return bool(self._backends)
        return kind in self._backends


_default_probe: RuntimeCapabilities | None = None


def default_capabilities() -> RuntimeCapabilities:
    """Return the process-wide runtime probe, creating it on first call."""
    global _default_probe
    if _default_probe is None:
        _default_probe = RuntimeCapabilities()
    return _default_probe
