"""pluginseal: signature verification for loadable plugins.

Verifies, before a host instantiates a plugin, that the plugin's code has
not been tampered with and comes from a trusted publisher:
  - Trusted publisher registry (publisher id -> PEM public key)
  - SHA-256 fingerprint of the plugin's identity and lifecycle hooks
  - RS256 / ES256 verification through a server (cryptography) or
    sandbox (PyJWT) backend, chosen by runtime capability
  - Strict / lenient policy for unsigned, untrusted and invalid plugins
"""

__version__ = "0.1.0"
__description__ = "Plugin signature verification with trusted publisher keys"

from pluginseal.models import PluginDescriptor, VerificationResult, VerifierConfig
from pluginseal.plugins.verifier import PluginSignatureVerifier, build_verifier

__all__ = [
    "PluginDescriptor",
    "PluginSignatureVerifier",
    "VerificationResult",
    "VerifierConfig",
    "build_verifier",
    "__version__",
]
