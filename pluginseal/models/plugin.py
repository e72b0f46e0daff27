"""Plugin descriptor — the read-only view of a plugin handed in by the loader."""

from __future__ import annotations

from types import ModuleType
from typing import Any, Callable, Union

from pydantic import BaseModel, ConfigDict

# A lifecycle hook is either the function itself or its source text.
LifecycleHook = Union[Callable[..., Any], str]


class PluginDescriptor(BaseModel):
    """Identity and executable surface of a plugin.

    Only the serialized text of ``init``/``start``/``destroy`` is ever
    used; the hooks are never called.  ``signature`` is a base64 string,
    and ``None`` or ``""`` means the plugin is unsigned.

    Examples
    --------
    >>> desc = PluginDescriptor(
    ...     name="com.acme.widget",
    ...     version="1.0.0",
    ...     init="def init(ctx):\\n    return ctx\\n",
    ... )
    >>> desc.is_signed
    False
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    init: LifecycleHook
    start: LifecycleHook | None = None
    destroy: LifecycleHook | None = None
    signature: str | None = None

    @property
    def is_signed(self) -> bool:
        return bool(self.signature)

    @classmethod
    def from_module(cls, module: ModuleType) -> PluginDescriptor:
        """Build a descriptor from a plugin module's attributes.

        The module must define ``name``, ``version`` and ``init``; ``start``,
        ``destroy`` and ``signature`` are optional.

        Raises
        ------
        AttributeError
            If a required attribute is missing.
        """
        missing = [
            attr for attr in ("name", "version", "init")
            if not hasattr(module, attr)
        ]
        if missing:
            raise AttributeError(
                f"Plugin module '{module.__name__}' is missing required "
                f"attribute(s): {', '.join(missing)}"
            )
        return cls(
            name=module.name,
            version=module.version,
            init=module.init,
            start=getattr(module, "start", None),
            destroy=getattr(module, "destroy", None),
            signature=getattr(module, "signature", None),
        )
