from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any

from shapewire.dependencies import Dependency, Descriptor, RawDependency, concat_dependencies
from shapewire.keys import DEFAULT_KEY
from shapewire.providers import PostProcessor, Provider, ProvidersRegistrations
from shapewire.validation import ValidatedSignature

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Binder:
    """Fluent builder that registers a provider for one descriptor and key.

    ``with_`` and ``post_process`` never modify the binder they are called
    on; they return a new one. A partially configured binder can therefore be
    reused as the base of several registrations:

    .. code-block:: python

        base = container.bind(Owner).with_(Animal)
        base.to_factory(make_owner)
        base.with_(Groomer).to_factory(make_groomed_owner)  # replaces the first

    ``to_factory``, ``to_type`` and ``to_instance`` finish the chain by
    storing the provider. Nothing is invoked or validated until the
    descriptor is resolved.
    """

    registrations: ProvidersRegistrations
    descriptor: Descriptor
    key: Hashable | None = DEFAULT_KEY
    dependencies: tuple[Dependency, ...] = ()
    post_processor: PostProcessor | None = None

    def with_(self, *dependencies: RawDependency) -> Self:
        """Append dependencies, passed to the factory in accumulation order."""
        return replace(self, dependencies=concat_dependencies(self.dependencies, dependencies))

    def post_process(self, fn: Callable[[Any], Any]) -> Self:
        """Transform the produced value before it is cached and returned."""
        return replace(self, post_processor=fn)

    def to_factory(self, fn: Callable[..., Any]) -> None:
        """Bind to a factory receiving the resolved dependencies positionally."""
        signature = ValidatedSignature([dependency.type for dependency in self.dependencies], self.descriptor)
        provider = Provider(
            dependencies=self.dependencies,
            invoke=signature.implement(fn),
            key=self.key,
            post_processor=self.post_processor,
        )
        if self.registrations.find(self.descriptor, self.key) is not None:
            logger.debug("Replacing provider for %r (key=%r)", self.descriptor, self.key)
        self.registrations.add(self.descriptor, provider)
        logger.debug(
            "Bound %r (key=%r) with %d dependencies to %r",
            self.descriptor,
            self.key,
            len(self.dependencies),
            fn,
        )

    def to_type(self, cls: Callable[..., Any]) -> None:
        """Bind to a class constructed with the resolved dependencies."""

        def construct(*args: Any) -> Any:
            return cls(*args)

        construct.__qualname__ = f"construct[{getattr(cls, '__qualname__', cls)!s}]"
        self.to_factory(construct)

    def to_instance(self, value: Any) -> None:
        """Bind to a fixed value, validated on first resolution."""
        self.to_factory(lambda *_: value)
