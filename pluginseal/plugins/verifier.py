"""Plugin signature verifier — the policy engine in front of plugin loading.

Verification flow for one plugin::

    extract publisher id ── bad name ─────────► PluginNameFormatError
        │
        ├─ unsigned ──────► strict: UnsignedPluginError
        │                   lenient: verified=False "Plugin not signed"
        │
        ├─ no trusted key ► strict & !allow_self_signed: UntrustedPublisherError
        │                   otherwise: verified=False
        │
        └─ key ─► hash ─► backend.verify
                              ├─ True  ► verified=True
                              └─ False ► SignatureMismatchError (every mode)

A present-but-wrong signature is always fatal.  Missing crypto is always
fatal.  Any other exception raised while hashing or verifying propagates in
strict mode and becomes ``verified=False`` in lenient mode.

The verifier reports; the plugin loader decides.  Any exception raised
from here means "do not load this plugin".
"""

from __future__ import annotations

import logging

from pluginseal.bridge.crypto_bridge import (
    SignatureBackend,
    create_backend,
    select_backend_kind,
)
from pluginseal.config import SealConfig
from pluginseal.core.capabilities import BackendKind, CapabilityProbe, default_capabilities
from pluginseal.core.errors import (
    CryptoUnavailableError,
    PluginNameFormatError,
    SignatureMismatchError,
    UnsignedPluginError,
    UntrustedPublisherError,
)
from pluginseal.core.hasher import compute_plugin_hash
from pluginseal.core.production_guard import enforce_production_constraints
from pluginseal.models.plugin import PluginDescriptor
from pluginseal.models.verification import (
    SignatureAlgorithm,
    VerificationResult,
    VerifierConfig,
)
from pluginseal.plugins.registry import TrustedPublisherRegistry

logger = logging.getLogger(__name__)

UNSIGNED_ERROR = "Plugin not signed"
UNSIGNED_RECOMMENDATION = "Consider signing plugins for production environments"


def extract_publisher_id(plugin_name: str) -> str:
    """Return the publisher id of a reverse-domain plugin name.

    Raises
    ------
    PluginNameFormatError
        If the name has fewer than two non-empty dot-separated segments.

    Examples
    --------
    >>> extract_publisher_id("com.objectstack.engine.objectql")
    'com.objectstack'
    """
    parts = plugin_name.split(".")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise PluginNameFormatError(
            f"Invalid plugin name format: {plugin_name} "
            "(expected reverse domain notation)",
            plugin_name=plugin_name,
        )
    return f"{parts[0]}.{parts[1]}"


class PluginSignatureVerifier:
    """Verify plugin signatures against a registry of trusted publishers.

    Parameters
    ----------
    config:
        Algorithm, strictness and initial trusted keys.  The key map is
        copied into the verifier's own registry.
    log:
        Logger for audit entries.  Defaults to this module's logger.
    capabilities:
        Probe deciding hash strategy and signature backend.  Defaults to
        the runtime probe.

    Examples
    --------
    >>> verifier = PluginSignatureVerifier(
    ...     VerifierConfig(algorithm="RS256", strict_mode=False)
    ... )
    >>> verifier.get_trusted_publishers()
    []
    """

    def __init__(
        self,
        config: VerifierConfig,
        log: logging.Logger | logging.LoggerAdapter | None = None,
        *,
        capabilities: CapabilityProbe | None = None,
    ) -> None:
        self._config = config
        self._log = log or logger
        self._capabilities = capabilities or default_capabilities()
        self._registry = TrustedPublisherRegistry(config.trusted_public_keys, log=self._log)
        self._backends: dict[BackendKind, SignatureBackend] = {}

        if not self._registry:
            self._log.warning(
                "No trusted public keys configured - all signatures will fail"
            )

    # -- Properties ---------------------------------------------------------

    @property
    def config(self) -> VerifierConfig:
        return self._config

    @property
    def algorithm(self) -> SignatureAlgorithm:
        return self._config.algorithm

    @property
    def registry(self) -> TrustedPublisherRegistry:
        return self._registry

    # -- Trusted publishers -------------------------------------------------

    def register_public_key(self, publisher_id: str, public_key_pem: str) -> None:
        """Trust *public_key_pem* for plugins published by *publisher_id*."""
        self._registry.register_public_key(publisher_id, public_key_pem)

    def revoke_public_key(self, publisher_id: str) -> None:
        """Stop trusting *publisher_id*.  Idempotent."""
        self._registry.revoke_public_key(publisher_id)

    def get_trusted_publishers(self) -> list[str]:
        return self._registry.get_trusted_publishers()

    # -- Verification -------------------------------------------------------

    async def verify_plugin_signature(self, plugin: PluginDescriptor) -> VerificationResult:
        """Verify *plugin* under this verifier's policy.

        Returns
        -------
        VerificationResult
            For every non-fatal outcome.  ``verified`` is authoritative.

        Raises
        ------
        PluginNameFormatError
            Plugin name is not reverse-domain notation (every mode).
        UnsignedPluginError
            Unsigned plugin in strict mode.
        UntrustedPublisherError
            No trusted key, strict mode, self-signed not allowed.
        SignatureMismatchError
            Signature does not verify (every mode).
        CryptoUnavailableError
            No verification primitive reachable (every mode).
        """
        context = {"plugin": plugin.name}
        try:
            publisher_id = extract_publisher_id(plugin.name)
        except PluginNameFormatError as exc:
            self._log.error("%s", exc.message, extra=context)
            raise
        context["publisher_id"] = publisher_id

        if not plugin.is_signed:
            return self._handle_unsigned(plugin, publisher_id)

        # Snapshot: the rest of this call uses this key even if the
        # registry changes underneath it.
        public_key = self._registry.get(publisher_id)
        if public_key is None:
            return self._handle_untrusted(plugin, publisher_id)

        algorithm = self._config.algorithm
        try:
            plugin_hash = compute_plugin_hash(plugin, self._capabilities, self._log)
            backend = self._backend(select_backend_kind(algorithm, self._capabilities))
            is_valid = await backend.verify(
                plugin_hash, plugin.signature or "", public_key, algorithm
            )
        except CryptoUnavailableError as exc:
            exc.plugin_name = plugin.name
            exc.publisher_id = publisher_id
            self._log.error(
                "Cannot verify plugin %s: %s", plugin.name, exc.message, extra=context
            )
            raise
        except Exception as exc:
            self._log.error(
                "Signature verification error: %s", plugin.name,
                exc_info=exc, extra=context,
            )
            if self._config.strict_mode:
                raise
            return VerificationResult(
                verified=False, error=str(exc), publisher_id=publisher_id
            )

        if not is_valid:
            error = f"Signature verification failed for plugin: {plugin.name}"
            self._log.error(error, extra=context)
            raise SignatureMismatchError(
                error, plugin_name=plugin.name, publisher_id=publisher_id
            )

        self._log.info(
            "Plugin signature verified: %s",
            plugin.name,
            extra={**context, "algorithm": algorithm.value},
        )
        return VerificationResult(
            verified=True, publisher_id=publisher_id, algorithm=algorithm.value
        )

    # -- Policy branches ----------------------------------------------------

    def _handle_unsigned(
        self, plugin: PluginDescriptor, publisher_id: str
    ) -> VerificationResult:
        context = {"plugin": plugin.name, "publisher_id": publisher_id}
        if self._config.strict_mode:
            error = f"Plugin missing signature (strict mode): {plugin.name}"
            self._log.error(error, extra=context)
            raise UnsignedPluginError(
                error, plugin_name=plugin.name, publisher_id=publisher_id
            )

        self._log.warning(
            "Plugin not signed: %s",
            plugin.name,
            extra={**context, "recommendation": UNSIGNED_RECOMMENDATION},
        )
        return VerificationResult(
            verified=False, error=UNSIGNED_ERROR, publisher_id=publisher_id
        )

    def _handle_untrusted(
        self, plugin: PluginDescriptor, publisher_id: str
    ) -> VerificationResult:
        error = f"No trusted public key for publisher: {publisher_id}"
        self._log.warning(error, extra={"plugin": plugin.name, "publisher_id": publisher_id})
        if self._config.strict_mode and not self._config.allow_self_signed:
            raise UntrustedPublisherError(
                error, plugin_name=plugin.name, publisher_id=publisher_id
            )
        return VerificationResult(verified=False, error=error, publisher_id=publisher_id)

    def _backend(self, kind: BackendKind) -> SignatureBackend:
        backend = self._backends.get(kind)
        if backend is None:
            backend = create_backend(kind)
            self._backends[kind] = backend
        return backend


def build_verifier(
    settings: SealConfig | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
    *,
    capabilities: CapabilityProbe | None = None,
) -> PluginSignatureVerifier:
    """Build a verifier from environment-driven settings.

    Runs the production guard first, so a production process cannot start
    with a permissive policy.

    Raises
    ------
    VerifierConfigError
        If production constraints are violated.
    """
    settings = settings or SealConfig()
    enforce_production_constraints(settings)
    return PluginSignatureVerifier(
        settings.to_verifier_config(), log, capabilities=capabilities
    )
