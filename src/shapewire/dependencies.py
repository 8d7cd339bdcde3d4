from __future__ import annotations

from collections.abc import Hashable, Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from shapewire.keys import DEFAULT_KEY

Descriptor: TypeAlias = Any
"""A type descriptor: anything pydantic can validate against, matched by identity."""


@dataclass(frozen=True, slots=True, eq=False)
class Dependency:
    """One positional argument required by a provider."""

    type: Descriptor
    """The descriptor the argument is resolved from and validated against."""
    key: Hashable | None = DEFAULT_KEY
    """The key to resolve the descriptor with."""
    strict: bool = False
    """If False, a missing keyed provider falls back to the default key."""


RawDependency: TypeAlias = Dependency | Descriptor
"""Either a bare descriptor or an explicit ``Dependency``."""


def build_dependency(raw: RawDependency) -> Dependency:
    """Normalize a bare descriptor into an unkeyed, non-strict ``Dependency``."""
    if isinstance(raw, Dependency):
        return raw
    return Dependency(type=raw)


def concat_dependencies(
    first: Iterable[Dependency],
    second: Iterable[RawDependency],
) -> tuple[Dependency, ...]:
    """Return ``first`` followed by the normalized ``second``, order preserved."""
    return (*first, *(build_dependency(raw) for raw in second))


def dep(type: Descriptor, key: Hashable | None = DEFAULT_KEY, strict: bool = True) -> Dependency:  # noqa: A002
    """Declare an explicit dependency.

    Explicit dependencies default to ``strict=True``: a keyed dependency must
    find a provider under exactly that key. Pass ``strict=False`` to let it
    fall back to the default key when the keyed provider is missing. Bare
    descriptors passed to ``Binder.with_`` are non-strict and unkeyed.

    Examples:
        .. code-block:: python

            container.bind(Owner).with_(dep(Animal, sneaky_cat, strict=False)).to_factory(make_owner)
    """
    return Dependency(type=type, key=key, strict=strict)
