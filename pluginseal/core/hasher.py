"""Plugin code fingerprinting.

The fingerprint covers the plugin's identity and its lifecycle hooks, in a
fixed order::

    name | version | init | start? | destroy?

Two strategies compute the digest:

* **strong** — SHA-256 over the UTF-8 bytes, lowercase hex.
* **fallback** — a 32-bit rolling hash (``h = h*31 + unit``) over UTF-16
  code units, rendered as signed hex.  It is NOT a security control and
  every use logs a warning.

Which one runs is decided per call by the ``CapabilityProbe``.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
import struct
import textwrap
from enum import Enum

from pluginseal.core.capabilities import CapabilityProbe, default_capabilities
from pluginseal.core.errors import PluginHashError
from pluginseal.models.plugin import LifecycleHook, PluginDescriptor

logger = logging.getLogger(__name__)

# NOTE: a hook whose source contains "|" can shift field boundaries.
# Kept for compatibility with existing signatures; see DESIGN.md.
CODE_DELIMITER = "|"


class HashStrategy(str, Enum):
    STRONG = "sha256"
    FALLBACK = "rolling32"


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def key_fingerprint(public_key_pem: str) -> str:
    """Short fingerprint of a PEM public key for display and audit logs.

    First 16 hex characters of SHA-256 over the PEM text with whitespace
    removed, so re-wrapped copies of the same key match.
    """
    if not public_key_pem:
        return ""
    return sha256_hex("".join(public_key_pem.split()).encode("utf-8"))[:16]


def serialize_hook(hook: LifecycleHook) -> str:
    """Return the textual form of a lifecycle hook.

    Source text is taken verbatim; callables are rendered with
    ``inspect.getsource`` and dedented so nesting depth does not change the
    fingerprint.
    """
    if isinstance(hook, str):
        return hook
    try:
        source = inspect.getsource(hook)
    except (OSError, TypeError) as exc:
        name = getattr(hook, "__qualname__", repr(hook))
        raise PluginHashError(f"Cannot read source of hook {name}: {exc}") from exc
    return textwrap.dedent(source)


def serialize_plugin_code(plugin: PluginDescriptor) -> str:
    """Join identity and hook sources with ``CODE_DELIMITER``."""
    parts = [plugin.name, plugin.version, serialize_hook(plugin.init)]
    if plugin.start is not None:
        parts.append(serialize_hook(plugin.start))
    if plugin.destroy is not None:
        parts.append(serialize_hook(plugin.destroy))
    return CODE_DELIMITER.join(parts)


def strong_hash(code: str) -> str:
    return sha256_hex(code.encode("utf-8"))


def fallback_hash(code: str) -> str:
    """32-bit rolling hash of *code*, as signed hex.

    Examples
    --------
    >>> fallback_hash("")
    '0'
    >>> fallback_hash("a")
    '61'
    """
    raw = code.encode("utf-16-le", "surrogatepass")
    units = struct.unpack(f"<{len(raw) // 2}H", raw)
    h = 0
    for unit in units:
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h & 0x80000000:
        h -= 1 << 32
    return format(h, "x") if h >= 0 else "-" + format(-h, "x")


def select_hash_strategy(capabilities: CapabilityProbe | None = None) -> HashStrategy:
    probe = capabilities or default_capabilities()
    return HashStrategy.STRONG if probe.has_strong_hash() else HashStrategy.FALLBACK


def compute_plugin_hash(
    plugin: PluginDescriptor,
    capabilities: CapabilityProbe | None = None,
    log: logging.Logger | logging.LoggerAdapter | None = None,
) -> str:
    """Fingerprint *plugin*'s executable surface.

    Parameters
    ----------
    plugin:
        The descriptor to fingerprint.
    capabilities:
        Probe deciding between the strong and fallback strategies.
        Defaults to the runtime probe.
    log:
        Logger receiving the fallback warning.  Defaults to this module's.

    Raises
    ------
    PluginHashError
        If a hook's source text cannot be read.
    """
    log = log or logger
    code = serialize_plugin_code(plugin)
    if select_hash_strategy(capabilities) is HashStrategy.STRONG:
        return strong_hash(code)
    log.warning(
        "No strong hash primitive available, using non-cryptographic "
        "fallback hash for plugin %s (integrity NOT guaranteed).",
        plugin.name,
        extra={"plugin": plugin.name, "hash_strategy": HashStrategy.FALLBACK.value},
    )
    return fallback_hash(code)
