"""
Source Registry for VulnSweep passive subdomain adapters.

Provides a central, class-level registry where source adapters register
themselves via the :meth:`SourceRegistry.register` decorator.  Subdomain
reconnaissance asks the registry for a fresh instance of every adapter
and runs them side by side.
"""

from __future__ import annotations

from typing import Any, Type

from vulnsweep.modules.base import BaseSourceModule


class SourceRegistry:
    """Manages all available OSINT source adapters.

    Adapters are stored in a class-level dictionary keyed by their unique
    ``name`` attribute.  Registration happens at import time through the
    :meth:`register` class-method decorator.

    Example::

        @SourceRegistry.register
        class MySource(BaseSourceModule):
            name = "mysource"
            ...
    """

    _modules: dict[str, Type[BaseSourceModule]] = {}

    @classmethod
    def register(cls, module_class: Type[BaseSourceModule]) -> Type[BaseSourceModule]:
        """Class-method decorator that registers an adapter in the registry.

        Args:
            module_class: The adapter class to register.  Its ``name``
                          attribute is used as the registry key.

        Returns:
            The unmodified *module_class* so the decorator is transparent.
        """
        cls._modules[module_class.name] = module_class
        return module_class

    @classmethod
    def unregister(cls, name: str) -> None:
        """Remove an adapter by name; unknown names are ignored."""
        cls._modules.pop(name, None)

    @classmethod
    def names(cls) -> list[str]:
        """Return the registered adapter names, sorted."""
        return sorted(cls._modules)

    @classmethod
    def get_module(cls, name: str, **kwargs: Any) -> BaseSourceModule:
        """Instantiate and return a single adapter by name.

        Args:
            name:   The unique adapter identifier (e.g. ``"crtsh"``).
            kwargs: Forwarded to the adapter constructor
                    (``timeout``, ``transport``).

        Raises:
            KeyError: If no adapter with the given name is registered.
        """
        return cls._modules[name](**kwargs)

    @classmethod
    def get_all(cls, **kwargs: Any) -> list[BaseSourceModule]:
        """Return fresh instances of every registered adapter, ordered by name."""
        return [cls._modules[name](**kwargs) for name in cls.names()]
