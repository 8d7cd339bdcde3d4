from __future__ import annotations

from collections.abc import Hashable, Sequence
from typing import Any, Literal

ValidationPhase = Literal["arguments", "return"]


class ShapeWireError(Exception):
    """Represent a base class for all ShapeWire-specific failures.

    Catch this type when you want to handle any ShapeWire error path without
    matching each concrete exception class individually.
    """


class ShapeWireResolutionError(ShapeWireError):
    """Signal that a descriptor and key pair has no provider.

    Raised by ``Container.resolve`` when nothing was bound for the requested
    pair, either directly or for one of the dependencies walked while building
    it. A non-strict keyed dependency recovers from this error by retrying the
    default key; nothing else in the container catches it.

    Typical fixes include binding the descriptor (``container.bind(D)``) or
    making sure the exact same descriptor object is used for binding and
    resolution, since descriptors are matched by identity.
    """

    def __init__(self, descriptor: Any, key: Hashable | None) -> None:
        self.descriptor = descriptor
        self.key = key
        super().__init__(f"Could not resolve dependency {descriptor!r} (key={key!r}): no provider is bound")


class ShapeWireValidationError(ShapeWireError):
    """Signal that a value does not satisfy its declared descriptor.

    Raised while a provider runs: either one of the resolved arguments fails
    its dependency descriptor (``phase == "arguments"``) or the produced value
    fails the bound descriptor (``phase == "return"``).

    ``errors`` holds itemized failures in pydantic's ``ValidationError.errors()``
    format. Argument failures carry the argument position as the first ``loc``
    item.

    ``descriptor`` is always the descriptor the failing provider is bound to,
    in both phases. For argument failures, the position in ``loc`` identifies
    which dependency was rejected.
    """

    def __init__(
        self,
        descriptor: Any,
        phase: ValidationPhase,
        errors: Sequence[dict[str, Any]],
    ) -> None:
        self.descriptor = descriptor
        self.phase = phase
        self.errors = list(errors)
        details = "\n".join(f"  {_format_loc(error.get('loc', ()))}: {error.get('msg', '')}" for error in self.errors)
        super().__init__(f"Invalid {phase} for {descriptor!r}: {len(self.errors)} validation error(s)\n{details}")


class ShapeWireInvalidDescriptorError(ShapeWireError):
    """Signal a descriptor the validation engine cannot build a validator for.

    Raised at bind time by ``Binder.to_factory``, ``Binder.to_type`` and
    ``Binder.to_instance``. Plain classes are not validated out of the box;
    wrap them as ``pydantic.InstanceOf[MyClass]`` and keep that alias in a
    variable so the same object is used everywhere.
    """

    def __init__(self, descriptor: Any, reason: BaseException) -> None:
        self.descriptor = descriptor
        self.reason = reason
        super().__init__(f"Cannot use {descriptor!r} as a descriptor: {reason}")


def _format_loc(loc: Sequence[Any]) -> str:
    return ".".join(str(item) for item in loc) or "<value>"
