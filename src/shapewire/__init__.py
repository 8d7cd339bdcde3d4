from shapewire.binder import Binder
from shapewire.container import Container
from shapewire.dependencies import Dependency, build_dependency, concat_dependencies, dep
from shapewire.exceptions import (
    ShapeWireError,
    ShapeWireInvalidDescriptorError,
    ShapeWireResolutionError,
    ShapeWireValidationError,
)
from shapewire.keys import DEFAULT_KEY, Key
from shapewire.validation import ValidatedAwaitable, ValidatedCall, ValidatedSignature, passthrough

__all__ = [
    "DEFAULT_KEY",
    "Binder",
    "Container",
    "Dependency",
    "Key",
    "ShapeWireError",
    "ShapeWireInvalidDescriptorError",
    "ShapeWireResolutionError",
    "ShapeWireValidationError",
    "ValidatedAwaitable",
    "ValidatedCall",
    "ValidatedSignature",
    "build_dependency",
    "concat_dependencies",
    "dep",
    "passthrough",
]
