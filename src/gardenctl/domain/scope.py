"""Scope — an ordered, read-only chain of variable layers.

Layers are given outermost-first and searched innermost-first, so an inner
layer shadows an outer one. Each layer wraps its mapping in a read-only
proxy; composing a new scope never copies or mutates existing layers.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class ScopeLayer:
    """One named mapping of variable name to raw expression.

    Ambient layers (the process environment) hold literal values: they take
    part in lookups, are never evaluated, and are not reported by
    :meth:`Scope.names`.
    """

    name: str
    entries: Mapping[str, str] = field(default_factory=dict)
    ambient: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))


class Scope:
    """Read-only composed view over an ordered chain of layers."""

    def __init__(self, label: str, layers: Iterable[ScopeLayer] = ()) -> None:
        self._label = label
        self._layers: tuple[ScopeLayer, ...] = tuple(layers)

    @property
    def label(self) -> str:
        """Scope identity: equal labels mean equal chains within one run."""
        return self._label

    @property
    def layers(self) -> tuple[ScopeLayer, ...]:
        return self._layers

    def lookup(self, name: str) -> tuple[ScopeLayer, str] | None:
        """Return ``(layer, raw_expression)`` for the innermost definition of *name*."""
        for layer in reversed(self._layers):
            if name in layer.entries:
                return layer, layer.entries[name]
        return None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def names(self) -> list[str]:
        """Every non-ambient name visible in this scope, outermost declaration first."""
        seen: dict[str, None] = {}
        for layer in self._layers:
            if layer.ambient:
                continue
            for name in layer.entries:
                seen.setdefault(name, None)
        return list(seen)

    def push(self, layer: ScopeLayer, *, label: str | None = None) -> Scope:
        """Return a new scope with *layer* innermost."""
        return Scope(label or self._label, (*self._layers, layer))

    def __iter__(self) -> Iterator[ScopeLayer]:
        return iter(self._layers)

    def __repr__(self) -> str:
        chain = " > ".join(layer.name for layer in self._layers)
        return f"Scope({self._label!r}: {chain})"
