"""Tests for the validated invocation adapter."""

from typing import Annotated, Any, get_args, get_origin

import pytest
from pydantic import BaseModel, ConfigDict, Field, InstanceOf, TypeAdapter

from shapewire import (
    ShapeWireInvalidDescriptorError,
    ShapeWireValidationError,
    ValidatedCall,
    ValidatedSignature,
    passthrough,
)
from shapewire.validation import adapter_for
from tests.pets import Animal, Dog, PetOwner

Name = Annotated[str, Field(min_length=1)]
Age = Annotated[int, Field(ge=0)]


class Point(BaseModel):
    model_config = ConfigDict(extra="forbid")

    x: int
    y: int


class PlainThing:
    pass


class TestPassthrough:
    def test_relaxes_model_forbidding_extra_fields(self) -> None:
        relaxed = passthrough(Point)

        assert get_origin(relaxed) is Annotated
        assert get_args(relaxed)[0] is Point
        assert TypeAdapter(relaxed).validate_python({"x": 1, "y": 2, "z": 3}) == Point(x=1, y=2)

    def test_keeps_other_descriptors(self) -> None:
        assert passthrough(Animal) is Animal
        assert passthrough(Name) is Name
        assert passthrough(int) is int

    def test_model_instances_pass_unchanged(self) -> None:
        point = Point(x=1, y=2)

        assert TypeAdapter(passthrough(Point)).validate_python(point) is point

    def test_aliases_are_known_fields(self) -> None:
        class Aliased(BaseModel):
            model_config = ConfigDict(extra="forbid")

            value: int = Field(alias="Value")

        adapter = adapter_for(Aliased)

        assert adapter.validate_python({"Value": 1, "other": 2}).value == 1


class TestAdapterFor:
    def test_rejects_plain_classes(self) -> None:
        with pytest.raises(ShapeWireInvalidDescriptorError) as exc_info:
            adapter_for(PlainThing)

        assert exc_info.value.descriptor is PlainThing

    def test_accepts_instance_of_plain_classes(self) -> None:
        thing = PlainThing()

        assert adapter_for(InstanceOf[PlainThing]).validate_python(thing) is thing


class TestValidatedCall:
    def test_validates_arguments_and_return(self) -> None:
        call = ValidatedSignature([Name, Age], str).implement(lambda name, age: f"{name} is {age}")

        assert call("rex", 3) == "rex is 3"

    def test_collects_errors_from_every_argument(self) -> None:
        call = ValidatedSignature([Name, Age], str).implement(lambda name, age: f"{name} is {age}")

        with pytest.raises(ShapeWireValidationError) as exc_info:
            call("", -1)

        assert exc_info.value.phase == "arguments"
        assert exc_info.value.descriptor is str
        assert [error["loc"] for error in exc_info.value.errors] == [(0,), (1,)]

    def test_nested_argument_errors_keep_their_location(self) -> None:
        call = ValidatedSignature([Point], int).implement(lambda point: point.x)

        with pytest.raises(ShapeWireValidationError) as exc_info:
            call({"x": 1, "y": "up"})

        assert exc_info.value.errors[0]["loc"] == (0, "y")

    def test_does_not_call_when_arguments_are_invalid(self) -> None:
        calls: list[Any] = []
        call = ValidatedSignature([Age], int).implement(calls.append)

        with pytest.raises(ShapeWireValidationError):
            call(-5)

        assert calls == []

    def test_rejects_wrong_argument_count(self) -> None:
        call = ValidatedSignature([Name], str).implement(lambda name: name)

        with pytest.raises(ShapeWireValidationError) as exc_info:
            call("a", "b")

        assert exc_info.value.errors[0]["type"] == "arguments_count"

    def test_rejects_invalid_return(self) -> None:
        call = ValidatedSignature([], Age).implement(lambda: -1)

        with pytest.raises(ShapeWireValidationError) as exc_info:
            call()

        assert exc_info.value.phase == "return"
        assert exc_info.value.descriptor is Age
        assert exc_info.value.errors[0]["type"] == "greater_than_equal"
        assert "greater than or equal to 0" in str(exc_info.value)

    def test_return_is_validated_value(self) -> None:
        call = ValidatedSignature([], Animal).implement(Dog)

        animal = call()

        assert isinstance(animal, Animal)
        assert animal.get_noise() == "woof"

    def test_arguments_are_relaxed(self) -> None:
        call = ValidatedSignature([PetOwner], int).implement(lambda owner: owner.pet.leg_count)

        assert call({"pet": {"leg_count": 3, "get_noise": str}, "extra": True}) == 3

    def test_call_with_binds_receiver(self) -> None:
        def describe(self: Any, prefix: str) -> str:
            return f"{prefix}: {self.get_noise()}"

        call = ValidatedSignature([Name], Name).implement(describe)

        assert call.call_with(Dog(), "dog") == "dog: woof"

    def test_call_with_none_receiver_calls_plainly(self) -> None:
        call = ValidatedSignature([Name], Name).implement(str.upper)

        assert call.call_with(None, "rex") == "REX"

    def test_call_with_validates_arguments(self) -> None:
        call = ValidatedSignature([Name], Name).implement(lambda self, name: name)

        with pytest.raises(ShapeWireValidationError):
            call.call_with(Dog(), "")

    def test_binds_like_a_method(self) -> None:
        class Greeter:
            def __init__(self, greeting: str) -> None:
                self.greeting = greeting

            greet = ValidatedSignature([Name], Name).implement(lambda self, name: f"{self.greeting}, {name}")

        assert isinstance(Greeter.__dict__["greet"], ValidatedCall)
        assert isinstance(Greeter.greet, ValidatedCall)
        assert Greeter("Hello").greet("rex") == "Hello, rex"

    def test_keeps_wrapped_callable(self) -> None:
        def make() -> str:
            return "made"

        call = ValidatedSignature([], str).implement(make)

        assert call.__wrapped__ is make
        assert call.signature.returns is str
