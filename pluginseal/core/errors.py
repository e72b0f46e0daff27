"""Error taxonomy for plugin signature verification.

Every fatal condition raised by pluginseal derives from
``PluginSecurityError``.  The plugin loader treats any of them as
"do not load this plugin".

Hierarchy::

    PluginSecurityError
        VerifierConfigError      — production guard violations
        PluginNameFormatError    — name is not reverse-domain (always fatal)
        UnsignedPluginError      — no signature, strict mode
        UntrustedPublisherError  — no key on file, strict mode
        SignatureMismatchError   — signature present but wrong (always fatal)
        CryptoUnavailableError   — no verification primitive (always fatal)
        PluginHashError          — plugin code could not be serialized
"""

from __future__ import annotations

from typing import Any


class PluginSecurityError(RuntimeError):
    """Base class for all pluginseal errors."""

    def __init__(
        self,
        message: str,
        *,
        plugin_name: str | None = None,
        publisher_id: str | None = None,
    ) -> None:
        self.message = message
        self.plugin_name = plugin_name
        self.publisher_id = publisher_id
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for audit records."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "plugin_name": self.plugin_name,
            "publisher_id": self.publisher_id,
        }


class VerifierConfigError(PluginSecurityError):
    """Raised when the verifier cannot safely start with its configuration."""


class PluginNameFormatError(PluginSecurityError, ValueError):
    """Raised when a plugin name cannot be attributed to a publisher."""


class UnsignedPluginError(PluginSecurityError):
    """Raised for an unsigned plugin in strict mode."""


class UntrustedPublisherError(PluginSecurityError):
    """Raised when no trusted key is on file for the publisher (strict mode)."""


class SignatureMismatchError(PluginSecurityError):
    """Raised when a present signature fails to verify.

    Never downgraded to a soft result: a wrong signature means tampering
    or corruption.
    """


class CryptoUnavailableError(PluginSecurityError):
    """Raised when no signature verification primitive can be loaded."""


class PluginHashError(PluginSecurityError):
    """Raised when a plugin's executable surface cannot be serialized."""
