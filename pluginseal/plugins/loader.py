"""Plugin file loader — turns a plugin module on disk into a descriptor.

A plugin file is a Python module exposing::

    name = "com.acme.widget"      # reverse-domain notation
    version = "1.0.0"
    signature = "<base64>"        # optional

    def init(ctx): ...
    def start(ctx): ...           # optional
    def destroy(ctx): ...         # optional

Importing the module runs its top-level statements but never calls any
lifecycle hook.  Only the hooks' source text is fingerprinted.
"""

from __future__ import annotations

import importlib.util
import logging
import uuid
from pathlib import Path

from pluginseal.models.plugin import PluginDescriptor

logger = logging.getLogger(__name__)


def load_plugin_descriptor(path: Path) -> PluginDescriptor:
    """Import the plugin module at *path* and describe it.

    Raises
    ------
    FileNotFoundError
        If *path* is not a file.
    ImportError
        If the module cannot be imported.
    AttributeError
        If the module lacks ``name``, ``version`` or ``init``.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Plugin file not found: {path}")

    module_name = f"_pluginseal_plugin_{path.stem}_{uuid.uuid4().hex[:8]}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Cannot import plugin file: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    descriptor = PluginDescriptor.from_module(module)
    logger.debug(
        "Loaded plugin descriptor %s v%s from %s (signed=%s).",
        descriptor.name, descriptor.version, path, descriptor.is_signed,
    )
    return descriptor
