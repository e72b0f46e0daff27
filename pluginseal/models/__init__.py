"""pluginseal data models — all Pydantic v2, all frozen (immutable)."""

from pluginseal.models.plugin import LifecycleHook, PluginDescriptor
from pluginseal.models.verification import (
    SignatureAlgorithm,
    VerificationResult,
    VerifierConfig,
)

__all__ = [
    "LifecycleHook",
    "PluginDescriptor",
    "SignatureAlgorithm",
    "VerificationResult",
    "VerifierConfig",
]
