"""Plugin trust: publisher registry, signature verifier, plugin file loader."""

from pluginseal.plugins.loader import load_plugin_descriptor
from pluginseal.plugins.registry import TrustedPublisherRegistry
from pluginseal.plugins.verifier import (
    PluginSignatureVerifier,
    build_verifier,
    extract_publisher_id,
)

__all__ = [
    "PluginSignatureVerifier",
    "TrustedPublisherRegistry",
    "build_verifier",
    "extract_publisher_id",
    "load_plugin_descriptor",
]
