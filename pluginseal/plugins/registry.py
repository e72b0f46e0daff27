"""Trusted publisher registry — publisher id to PEM public key.

Each verifier owns one registry.  There is no module-level trust store:
callers that need a shared, process-wide set of trusted publishers share
the verifier instance.

The registry performs no PEM validation; a malformed key is only detected
when a signature backend fails to import it, which reads as a failed
verification.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)


class TrustedPublisherRegistry:
    """In-memory mapping of publisher id to PEM-encoded public key.

    Parameters
    ----------
    initial_keys:
        Keys to seed the registry with.  The mapping is copied.
    log:
        Logger receiving registration and revocation entries.

    Examples
    --------
    >>> registry = TrustedPublisherRegistry()
    >>> registry.register_public_key("com.acme", "-----BEGIN PUBLIC KEY-----...")
    >>> registry.get_trusted_publishers()
    ['com.acme']
    >>> registry.revoke_public_key("com.acme")
    >>> registry.get("com.acme") is None
    True
    """

    def __init__(
        self,
        initial_keys: Mapping[str, str] | None = None,
        *,
        log: logging.Logger | logging.LoggerAdapter | None = None,
    ) -> None:
        self._keys: dict[str, str] = dict(initial_keys or {})
        self._log = log or logger

    # -- Mutation -----------------------------------------------------------

    def register_public_key(self, publisher_id: str, public_key_pem: str) -> None:
        """Insert or overwrite the key for *publisher_id*."""
        replaced = publisher_id in self._keys
        self._keys[publisher_id] = public_key_pem
        self._log.info(
            "Trusted public key %s for: %s",
            "replaced" if replaced else "registered",
            publisher_id,
            extra={"publisher_id": publisher_id},
        )

    def revoke_public_key(self, publisher_id: str) -> None:
        """Remove the key for *publisher_id*.  Revoking an unknown id is a no-op."""
        removed = self._keys.pop(publisher_id, None) is not None
        self._log.warning(
            "Public key revoked for: %s%s",
            publisher_id,
            "" if removed else " (no key was registered)",
            extra={"publisher_id": publisher_id},
        )

    # -- Lookup -------------------------------------------------------------

    def get(self, publisher_id: str) -> str | None:
        """Return the PEM key for *publisher_id*, or ``None``."""
        return self._keys.get(publisher_id)

    def get_trusted_publishers(self) -> list[str]:
        """Snapshot of the registered publisher ids."""
        return list(self._keys)

    def __contains__(self, publisher_id: object) -> bool:
        return publisher_id in self._keys

    def __len__(self) -> int:
        return len(self._keys)
