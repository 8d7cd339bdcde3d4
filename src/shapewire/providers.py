from __future__ import annotations

from collections.abc import Callable, Hashable, Iterator
from dataclasses import dataclass
from typing import Any, Final, Generic, TypeVar

from shapewire.dependencies import Dependency, Descriptor
from shapewire.exceptions import ShapeWireResolutionError
from shapewire.validation import ValidatedCall

V = TypeVar("V")

PostProcessor = Callable[[Any], Any]


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Final = _Missing()
"""Returned by ``InstancesStorage.get`` on a cache miss."""


@dataclass(frozen=True, slots=True)
class Provider:
    """A registered recipe for producing a value of a descriptor."""

    dependencies: tuple[Dependency, ...]
    """Dependencies resolved and passed positionally to ``invoke``."""
    invoke: ValidatedCall
    """The validated factory."""
    key: Hashable | None
    """The key this provider is bound under."""
    post_processor: PostProcessor | None = None
    """Optional transform applied to the produced value before caching."""


class DescriptorTable(Generic[V]):
    """Two-level mapping ``descriptor -> key -> value`` keyed by descriptor identity.

    Descriptors such as ``Annotated`` aliases may compare equal, or fail to
    hash, so they are indexed by ``id``. The descriptor itself is kept next to
    its entries so the id stays reserved for as long as the entry exists.
    """

    def __init__(self) -> None:
        self._rows: dict[int, tuple[Descriptor, dict[Hashable | None, V]]] = {}

    def get(self, descriptor: Descriptor, key: Hashable | None) -> V | None:
        row = self._rows.get(id(descriptor))
        if row is None:
            return None
        return row[1].get(key)

    def contains(self, descriptor: Descriptor, key: Hashable | None) -> bool:
        row = self._rows.get(id(descriptor))
        return row is not None and key in row[1]

    def set(self, descriptor: Descriptor, key: Hashable | None, value: V) -> None:
        row = self._rows.get(id(descriptor))
        if row is None:
            row = (descriptor, {})
            self._rows[id(descriptor)] = row
        row[1][key] = value

    def items(self) -> Iterator[tuple[Descriptor, Hashable | None, V]]:
        for descriptor, values in self._rows.values():
            for key, value in values.items():
                yield descriptor, key, value

    def clear(self) -> None:
        self._rows.clear()

    def __len__(self) -> int:
        return sum(len(values) for _, values in self._rows.values())


class ProvidersRegistrations:
    """Holds all providers bound in a container."""

    def __init__(self) -> None:
        self._table: DescriptorTable[Provider] = DescriptorTable()

    def add(self, descriptor: Descriptor, provider: Provider) -> None:
        """Store a provider, replacing any provider bound to the same descriptor and key."""
        self._table.set(descriptor, provider.key, provider)

    def get(self, descriptor: Descriptor, key: Hashable | None) -> Provider:
        """Get the provider for a descriptor and key, or raise ``ShapeWireResolutionError``."""
        provider = self._table.get(descriptor, key)
        if provider is None:
            raise ShapeWireResolutionError(descriptor, key)
        return provider

    def find(self, descriptor: Descriptor, key: Hashable | None) -> Provider | None:
        """Find the provider for a descriptor and key, if any."""
        return self._table.get(descriptor, key)

    def clear(self) -> None:
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)


class InstancesStorage:
    """Singleton cache of resolved values, one per descriptor and key."""

    def __init__(self) -> None:
        self._table: DescriptorTable[Any] = DescriptorTable()

    def get(self, descriptor: Descriptor, key: Hashable | None) -> Any:
        if not self._table.contains(descriptor, key):
            return MISSING
        return self._table.get(descriptor, key)

    def set(self, descriptor: Descriptor, key: Hashable | None, instance: Any) -> None:
        self._table.set(descriptor, key, instance)

    def __contains__(self, item: tuple[Descriptor, Hashable | None]) -> bool:
        descriptor, key = item
        return self._table.contains(descriptor, key)

    def clear(self) -> None:
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)
