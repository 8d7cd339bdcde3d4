"""Validated invocation on top of pydantic.

A ``ValidatedSignature`` pairs ordered argument descriptors with a return
descriptor. ``ValidatedSignature.implement`` wraps a plain callable into a
``ValidatedCall`` that validates positional arguments before the call and the
result after it. Every value handed onward is the validated one, so model
descriptors yield model instances even when the callable produced a plain
mapping or an object with matching attributes.

Object-shaped descriptors are relaxed with ``passthrough`` first, so a richer
value than the declared shape is accepted instead of rejected.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Coroutine, Generator, Mapping, Sequence
from types import MethodType
from typing import Annotated, Any, NoReturn, get_args, get_origin

from pydantic import (
    BaseModel,
    BeforeValidator,
    InstanceOf,
    PydanticUndefinedAnnotation,
    PydanticUserError,
    TypeAdapter,
    ValidationError,
)

from shapewire.dependencies import Descriptor
from shapewire.exceptions import ShapeWireInvalidDescriptorError, ShapeWireValidationError, ValidationPhase

_COROUTINE_RESULT_INDEX = 2
_ASYNC_ORIGINS: tuple[type[Any], ...] = (Awaitable, Coroutine)
_AWAITABLE_ADAPTER: TypeAdapter[Any] = TypeAdapter(InstanceOf[Awaitable])
_ModelMetaclass = type(BaseModel)


def passthrough(descriptor: Descriptor) -> Descriptor:
    """Relax a model descriptor that forbids extra fields.

    Mapping input has unknown keys dropped before the model sees it. Any other
    descriptor is returned as is, since pydantic already ignores extra input
    unless a model opts into ``extra="forbid"``.
    """
    if isinstance(descriptor, _ModelMetaclass) and descriptor.model_config.get("extra") == "forbid":
        return Annotated[descriptor, BeforeValidator(functools.partial(_drop_unknown_fields, descriptor))]
    return descriptor


def adapter_for(descriptor: Descriptor) -> TypeAdapter[Any]:
    """Build a ``TypeAdapter`` over the passthrough form of ``descriptor``.

    The validator is built eagerly, so descriptors that are not fully defined
    fail here rather than on first use.
    """
    try:
        adapter = TypeAdapter(passthrough(descriptor))
        adapter.rebuild(raise_errors=True)
    except (PydanticUserError, PydanticUndefinedAnnotation, TypeError) as exc:
        raise ShapeWireInvalidDescriptorError(descriptor, exc) from exc
    return adapter


def is_async_descriptor(descriptor: Descriptor) -> bool:
    return descriptor in _ASYNC_ORIGINS or get_origin(descriptor) in _ASYNC_ORIGINS


def awaited_descriptor(descriptor: Descriptor) -> Descriptor:
    """Return ``T`` for ``Awaitable[T]`` and ``Coroutine[Any, Any, T]``."""
    args = get_args(descriptor)
    if not args:
        return Any
    if get_origin(descriptor) is Coroutine:
        return args[_COROUTINE_RESULT_INDEX]
    return args[0]


class ValidatedSignature:
    """Argument and return descriptors that calls are checked against."""

    def __init__(self, args: Sequence[Descriptor], returns: Descriptor) -> None:
        self.args = tuple(args)
        self.returns = returns
        self.is_async = is_async_descriptor(returns)

        # Awaitable arguments are only checked for being awaitable; their
        # awaited value is validated by the signature that produced them.
        self._arg_adapters = tuple(
            _AWAITABLE_ADAPTER if is_async_descriptor(arg) else adapter_for(arg) for arg in self.args
        )
        self._return_adapter = adapter_for(awaited_descriptor(returns) if self.is_async else returns)

    def implement(self, fn: Callable[..., Any]) -> ValidatedCall:
        return ValidatedCall(self, fn)

    def validate_arguments(self, args: Sequence[Any]) -> list[Any]:
        """Validate positional arguments, collecting the failures of all of them."""
        if len(args) != len(self._arg_adapters):
            self._raise(
                "arguments",
                [
                    {
                        "type": "arguments_count",
                        "loc": (),
                        "msg": f"Expected {len(self._arg_adapters)} positional arguments, got {len(args)}",
                        "input": tuple(args),
                    },
                ],
            )

        validated: list[Any] = []
        errors: list[dict[str, Any]] = []
        first_failure: ValidationError | None = None
        for index, (adapter, value) in enumerate(zip(self._arg_adapters, args)):
            try:
                validated.append(adapter.validate_python(value, strict=True, from_attributes=True))
            except ValidationError as exc:
                first_failure = first_failure or exc
                errors.extend({**error, "loc": (index, *error["loc"])} for error in exc.errors(include_url=False))

        if errors:
            self._raise("arguments", errors, cause=first_failure)
        return validated

    def validate_return(self, value: Any) -> Any:
        """Validate a call result.

        For async return descriptors the result must be awaitable. It is wrapped
        in a ``ValidatedAwaitable`` that validates the awaited value.
        """
        if not self.is_async:
            return self._validate(self._return_adapter, value)

        awaitable = self._validate(_AWAITABLE_ADAPTER, value)
        return ValidatedAwaitable(awaitable, self._validate_awaited)

    def _validate_awaited(self, value: Any) -> Any:
        return self._validate(self._return_adapter, value)

    def _validate(self, adapter: TypeAdapter[Any], value: Any) -> Any:
        try:
            return adapter.validate_python(value, strict=True, from_attributes=True)
        except ValidationError as exc:
            self._raise("return", exc.errors(include_url=False), cause=exc)

    def _raise(
        self,
        phase: ValidationPhase,
        errors: Sequence[dict[str, Any]],
        cause: BaseException | None = None,
    ) -> NoReturn:
        raise ShapeWireValidationError(self.returns, phase, errors) from cause

    def __repr__(self) -> str:
        return f"ValidatedSignature(args={self.args!r}, returns={self.returns!r})"


class ValidatedCall:
    """A callable whose arguments and result are validated on every call.

    ``call_with`` invokes the wrapped callable bound to an explicit receiver.
    Stored as a class attribute, a ``ValidatedCall`` binds the accessing
    instance the same way, like a plain method would.
    """

    def __init__(self, signature: ValidatedSignature, fn: Callable[..., Any]) -> None:
        self.signature = signature
        self.__wrapped__ = fn

    def __call__(self, *args: Any) -> Any:
        return self._invoke(self.__wrapped__, args)

    def call_with(self, receiver: Any, *args: Any) -> Any:
        fn = self.__wrapped__ if receiver is None else MethodType(self.__wrapped__, receiver)
        return self._invoke(fn, args)

    def __get__(self, instance: Any, owner: type[Any] | None = None) -> Any:
        if instance is None:
            return self
        return functools.partial(self.call_with, instance)

    def _invoke(self, fn: Callable[..., Any], args: Sequence[Any]) -> Any:
        validated = self.signature.validate_arguments(args)
        return self.signature.validate_return(fn(*validated))

    def __repr__(self) -> str:
        return f"ValidatedCall({self.__wrapped__!r}, {self.signature!r})"


class ValidatedAwaitable:
    """Awaitable result of an async provider, validated once when first awaited.

    Like a future, it can be awaited any number of times and by several
    awaiters; every await yields the same validated value or raises the same
    error. The wrapped awaitable starts running on the first await.
    """

    def __init__(self, awaitable: Awaitable[Any], validate: Callable[[Any], Any]) -> None:
        self._awaitable = awaitable
        self._validate = validate
        self._task: asyncio.Future[Any] | None = None

    def __await__(self) -> Generator[Any, None, Any]:
        if self._task is None:
            self._task = asyncio.create_task(self._run())
        return self._task.__await__()

    async def _run(self) -> Any:
        return self._validate(await self._awaitable)

    def __repr__(self) -> str:
        return f"ValidatedAwaitable({self._awaitable!r})"


def _drop_unknown_fields(model: type[BaseModel], value: Any) -> Any:
    if not isinstance(value, Mapping):
        return value

    known: set[str] = set()
    for name, field in model.model_fields.items():
        known.add(name)
        if field.alias is not None:
            known.add(field.alias)
        if isinstance(field.validation_alias, str):
            known.add(field.validation_alias)
    return {key: item for key, item in value.items() if key in known}
