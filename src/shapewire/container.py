from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Any

from shapewire.binder import Binder
from shapewire.dependencies import Dependency, Descriptor
from shapewire.exceptions import ShapeWireResolutionError
from shapewire.keys import DEFAULT_KEY
from shapewire.providers import MISSING, InstancesStorage, ProvidersRegistrations

logger = logging.getLogger(__name__)


class Container:
    """Bind descriptors to providers and resolve validated singletons.

    A descriptor is anything pydantic can validate against: model classes,
    builtin types, ``Annotated`` aliases, ``InstanceOf[...]`` and so on.
    Descriptors are matched by identity, never by shape, so keep each one in
    a variable and use that same object for binding, dependencies and
    resolution.

    Every resolved value is cached for the lifetime of the container. Each
    provider runs at most once per descriptor and key, its arguments and its
    result validated against the declared descriptors.

    The container is not thread-safe and does not detect dependency cycles; a
    cycle ends in ``RecursionError``.
    """

    def __init__(self) -> None:
        self._providers = ProvidersRegistrations()
        self._instances = InstancesStorage()

    def bind(self, descriptor: Descriptor, key: Hashable | None = DEFAULT_KEY) -> Binder:
        """Start a binding for ``descriptor`` under ``key``.

        Examples:
            .. code-block:: python

                container.bind(Owner).with_(Animal).to_factory(lambda pet: {"pet": pet})
                container.bind(Animal, sneaky_cat).to_instance(cat)
        """
        return Binder(registrations=self._providers, descriptor=descriptor, key=key)

    def resolve(self, descriptor: Descriptor, key: Hashable | None = DEFAULT_KEY) -> Any:
        """Resolve the value bound to ``descriptor`` under ``key``.

        Dependencies are resolved first, in declared order, then the provider
        runs and its post-processor is applied. The final value is cached and
        returned by every later call with the same descriptor and key.

        Raises:
            ShapeWireResolutionError: If no provider is bound for the pair or
                for one of its dependencies.
            ShapeWireValidationError: If a provider received or produced a
                value that does not satisfy its descriptor.
        """
        cached = self._instances.get(descriptor, key)
        if cached is not MISSING:
            return cached

        provider = self._providers.get(descriptor, key)
        logger.debug("Building %r (key=%r)", descriptor, key)

        args = [self._resolve_dependency(dependency) for dependency in provider.dependencies]
        instance = provider.invoke(*args)
        if provider.post_processor is not None:
            instance = provider.post_processor(instance)

        self._instances.set(descriptor, key, instance)
        return instance

    def is_bound(self, descriptor: Descriptor, key: Hashable | None = DEFAULT_KEY) -> bool:
        """Return True if a provider is bound for ``descriptor`` under ``key``."""
        return self._providers.find(descriptor, key) is not None

    def close(self) -> None:
        """Drop every provider and cached instance held by the container."""
        logger.debug(
            "Closing container with %d providers and %d cached instances",
            len(self._providers),
            len(self._instances),
        )
        self._providers.clear()
        self._instances.clear()

    def _resolve_dependency(self, dependency: Dependency) -> Any:
        if dependency.key is DEFAULT_KEY:
            return self.resolve(dependency.type)

        try:
            return self.resolve(dependency.type, dependency.key)
        except ShapeWireResolutionError as keyed_error:
            if dependency.strict:
                raise
            logger.debug(
                "No provider for %r (key=%r), falling back to the default key",
                dependency.type,
                dependency.key,
            )
            try:
                return self.resolve(dependency.type)
            except ShapeWireResolutionError as default_error:
                raise default_error from keyed_error
