"""
Dependency-injection container.

Services are registered under an *abstract* key (a string such as
``"events"`` or a class) and resolved lazily on first use, following the
same lazy-initialisation approach as the backend components: nothing is
created until somebody asks for it.

Usage::

    from storm.core.container import Container

    container = Container()
    container.singleton("events", lambda c: Dispatcher())
    container.alias("events", Dispatcher)

    events = container.make("events")
    assert container.make(Dispatcher) is events   # alias, shared instance

Keys
----
Classes are normalised to their dotted ``module.QualName`` so that a class
and its import path string are the same key.

Tags:
    storm-core, dependency-injection, container, lazy-initialisation
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from storm.core.errors import BindingResolutionError, ContainerError

Abstract = str | type
Factory = Callable[..., Any]


def abstract_key(abstract: Abstract) -> str:
    """Normalise a class or string into the container's string key."""
    if isinstance(abstract, type):
        return f"{abstract.__module__}.{abstract.__qualname__}"
    return abstract


@dataclass
class Binding:
    """A registered factory. ``shared`` bindings are resolved at most once."""

    concrete: Factory | type
    shared: bool = False


class Container:
    """Lazy dependency container with shared instances and aliases."""

    def __init__(self) -> None:
        self._bindings: dict[str, Binding] = {}
        self._instances: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}
        self._resolved: set[str] = set()

    # ── Registration ─────────────────────────────────────────────

    def bind(self, abstract: Abstract, concrete: Factory | type | None = None, shared: bool = False) -> None:
        """Register a factory (called with the container) or a class to build.

        Rebinding drops any shared instance already resolved for the key.
        """
        key = abstract_key(abstract)
        if concrete is None:
            if not isinstance(abstract, type):
                raise ContainerError(f"Cannot bind [{key}] without a concrete implementation")
            concrete = abstract
        self._instances.pop(key, None)
        self._aliases.pop(key, None)
        self._bindings[key] = Binding(concrete, shared)

    def singleton(self, abstract: Abstract, concrete: Factory | type | None = None) -> None:
        self.bind(abstract, concrete, shared=True)

    def instance(self, abstract: Abstract, instance: Any) -> Any:
        """Register an existing object as the shared instance for ``abstract``."""
        key = abstract_key(abstract)
        self._aliases.pop(key, None)
        self._instances[key] = instance
        return instance

    def alias(self, abstract: Abstract, alias: Abstract) -> None:
        """Make ``alias`` resolve to the same service as ``abstract``."""
        key = abstract_key(abstract)
        alias_key = abstract_key(alias)
        if key == alias_key:
            raise ContainerError(f"[{key}] is aliased to itself.")
        self._aliases[alias_key] = key

    def get_alias(self, abstract: Abstract) -> str:
        """Follow the alias chain for ``abstract`` to its canonical key."""
        key = abstract_key(abstract)
        seen = {key}
        while key in self._aliases:
            key = self._aliases[key]
            if key in seen:
                raise ContainerError(f"[{key}] is aliased to itself.")
            seen.add(key)
        return key

    def is_alias(self, abstract: Abstract) -> bool:
        return abstract_key(abstract) in self._aliases

    # ── Inspection ───────────────────────────────────────────────

    def bound(self, abstract: Abstract) -> bool:
        key = abstract_key(abstract)
        return key in self._bindings or key in self._instances or key in self._aliases

    def resolved(self, abstract: Abstract) -> bool:
        key = self.get_alias(abstract)
        return key in self._resolved or key in self._instances

    def get_bindings(self) -> dict[str, Binding]:
        return dict(self._bindings)

    # ── Resolution ───────────────────────────────────────────────

    def make(self, abstract: Abstract, **parameters: Any) -> Any:
        """Resolve ``abstract`` from the container.

        Unbound classes are built directly. Passing ``parameters`` always
        builds a fresh object and never touches the shared instance cache.
        """
        key = self.get_alias(abstract)

        if key in self._instances and not parameters:
            return self._instances[key]

        binding = self._bindings.get(key)
        if binding is None:
            if isinstance(abstract, type) and abstract_key(abstract) == key:
                obj = self._build(abstract, parameters)
            else:
                raise BindingResolutionError(key)
        else:
            obj = self._build(binding.concrete, parameters)
            if binding.shared and not parameters:
                self._instances[key] = obj

        self._resolved.add(key)
        return obj

    def _build(self, concrete: Factory | type, parameters: dict[str, Any]) -> Any:
        if isinstance(concrete, type):
            if inspect.isabstract(concrete):
                raise BindingResolutionError(abstract_key(concrete), f"Target [{abstract_key(concrete)}] is not instantiable")
            try:
                return concrete(**parameters)
            except TypeError as exc:
                raise BindingResolutionError(abstract_key(concrete), cause=exc) from exc
        return concrete(self, **parameters)

    def forget_instance(self, abstract: Abstract) -> None:
        self._instances.pop(abstract_key(abstract), None)

    def forget_instances(self) -> None:
        self._instances.clear()

    # ── Mapping protocol ─────────────────────────────────────────

    def __getitem__(self, abstract: Abstract) -> Any:
        return self.make(abstract)

    def __contains__(self, abstract: Abstract) -> bool:
        return self.bound(abstract)
