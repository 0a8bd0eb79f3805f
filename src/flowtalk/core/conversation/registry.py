"""Module resolution - map string references to step factories.

A vertex names its behaviour with ``props["module"]`` and an optional
``props["key"]``. A callable reference is used as-is; a string reference is
looked up through a :class:`ModuleResolver`:

- :class:`ModuleRegistry`: explicit registration, no ambient lookups.
- :class:`ImportResolver`: opt-in importlib resolution behind an allow-list.
- :class:`ChainResolver`: try several resolvers in order.

Example:
    >>> registry = ModuleRegistry()
    >>> registry.register("forms/name", name_step)
    >>> registry.register_module("forms/address", {"default": street_step, "city": city_step})
    >>> registry.resolve("forms/address", "city")
    <function city_step ...>
"""

from __future__ import annotations

import importlib
import logging
import re
from collections.abc import Callable, Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from flowtalk.core.errors import ModuleResolutionError

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"

# module.path or module.path:attr
IMPORT_PATH_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*(:[A-Za-z_][A-Za-z0-9_]*)?$")

StepFactory = Callable[..., Any]


@runtime_checkable
class ModuleResolver(Protocol):
    """Strategy that turns a string module reference into a step factory."""

    def resolve(self, reference: str, key: str | None = None) -> StepFactory: ...


def _select(namespace: Any, reference: str, key: str) -> StepFactory:
    if isinstance(namespace, Mapping):
        factory = namespace.get(key)
    else:
        factory = getattr(namespace, key, None)
    if factory is None:
        raise ModuleResolutionError(reference, key, "no such export")
    if not callable(factory):
        raise ModuleResolutionError(reference, key, "export is not callable")
    return factory


class ModuleRegistry:
    """Explicit registry of step factories.

    Entries are either a single factory (registered under a key, "default"
    unless given) or a namespace (mapping or object) whose exports are
    selected by key.
    """

    def __init__(self, entries: Mapping[str, Any] | None = None) -> None:
        self._entries: dict[str, dict[str, StepFactory] | Any] = {}
        for name, value in (entries or {}).items():
            if callable(value):
                self.register(name, value)
            else:
                self.register_module(name, value)

    def register(self, name: str, factory: StepFactory, key: str = DEFAULT_KEY) -> ModuleRegistry:
        """Register a factory under a module name and export key.

        Returns:
            Self for chaining.

        Raises:
            ValueError: If the name is empty or the factory is not callable.
        """
        if not name or not name.strip():
            raise ValueError("module name cannot be empty")
        if not callable(factory):
            raise ValueError(f"factory for module '{name}' must be callable")

        exports = self._entries.get(name)
        if not isinstance(exports, dict):
            exports = {}
            self._entries[name] = exports
        exports[key] = factory
        return self

    def register_module(self, name: str, namespace: Any) -> ModuleRegistry:
        """Register a namespace whose attributes (or items) are the exports.

        Returns:
            Self for chaining.
        """
        if not name or not name.strip():
            raise ValueError("module name cannot be empty")
        self._entries[name] = namespace
        return self

    def unregister(self, name: str) -> bool:
        """Remove a module. Returns True if it was registered."""
        return self._entries.pop(name, None) is not None

    def resolve(self, reference: str, key: str | None = None) -> StepFactory:
        """Look up a factory.

        Raises:
            ModuleResolutionError: If the module or export is unknown.
        """
        if reference not in self._entries:
            raise ModuleResolutionError(reference, key, "not registered")
        return _select(self._entries[reference], reference, key or DEFAULT_KEY)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ModuleRegistry({list(self._entries)})"


class ImportResolver:
    """Resolve references by importing Python modules.

    ``"pkg.steps:ask_name"`` imports ``pkg.steps`` and returns ``ask_name``.
    ``"pkg.steps"`` with key ``"ask_name"`` does the same; without a key the
    module's ``default`` attribute is used.

    Only modules equal to, or nested under, one of ``allowed`` are imported.

    Args:
        allowed: Module prefixes that may be imported.
    """

    def __init__(self, allowed: Iterable[str]) -> None:
        self._allowed = tuple(allowed)

    def _is_allowed(self, module_name: str) -> bool:
        return any(module_name == a or module_name.startswith(a + ".") for a in self._allowed)

    def resolve(self, reference: str, key: str | None = None) -> StepFactory:
        if ".." in reference or not IMPORT_PATH_PATTERN.match(reference):
            raise ModuleResolutionError(reference, key, "invalid import path")

        module_name, _, attr = reference.partition(":")
        if not self._is_allowed(module_name):
            raise ModuleResolutionError(reference, key, "import not allowed")

        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ModuleResolutionError(reference, key, str(e)) from e

        logger.debug("module_imported: module=%s", module_name)
        return _select(module, reference, key or attr or DEFAULT_KEY)


class ChainResolver:
    """Try resolvers in order; the first that succeeds wins."""

    def __init__(self, *resolvers: ModuleResolver) -> None:
        if not resolvers:
            raise ValueError("ChainResolver needs at least one resolver")
        self._resolvers = resolvers

    def resolve(self, reference: str, key: str | None = None) -> StepFactory:
        last_error: ModuleResolutionError | None = None
        for resolver in self._resolvers:
            try:
                return resolver.resolve(reference, key)
            except ModuleResolutionError as e:
                last_error = e
        raise last_error or ModuleResolutionError(reference, key, "no resolvers")
