from typing import Annotated

from pydantic import Field

from shapewire import DEFAULT_KEY, Dependency, Key, build_dependency, concat_dependencies, dep

Name = Annotated[str, Field(min_length=1)]


def test_build_dependency_from_bare_descriptor() -> None:
    dependency = build_dependency(Name)

    assert dependency.type is Name
    assert dependency.key is DEFAULT_KEY
    assert dependency.strict is False


def test_build_dependency_keeps_explicit_dependency() -> None:
    explicit = Dependency(type=int, key=Key("k"), strict=True)

    assert build_dependency(explicit) is explicit


def test_concat_preserves_order() -> None:
    first = (build_dependency(int),)

    result = concat_dependencies(first, [Name, dep(str)])

    assert isinstance(result, tuple)
    assert [dependency.type for dependency in result] == [int, Name, str]
    assert result[0] is first[0]


def test_concat_empty() -> None:
    assert concat_dependencies((), ()) == ()


def test_dep_defaults_to_strict() -> None:
    dependency = dep(int)

    assert dependency.key is DEFAULT_KEY
    assert dependency.strict is True


def test_dep_with_key_and_strictness() -> None:
    key = Key("k")

    dependency = dep(int, key, strict=False)

    assert dependency.key is key
    assert dependency.strict is False


def test_dependencies_compare_by_identity() -> None:
    assert dep(int) != dep(int)


def test_keys_are_unique_tokens() -> None:
    assert Key("same") != Key("same")
    assert repr(Key("same")) == "Key('same')"
