"""Binding and resolving validated pets.

Demonstrates:
1. Binding a descriptor to a factory and to a class
2. Declaring dependencies with ``with_``
3. Keyed bindings and the non-strict fallback to the default key
4. Singleton caching and post-processing
"""

from collections.abc import Callable

from pydantic import BaseModel, ConfigDict

from shapewire import Container, Key, dep


class Animal(BaseModel):
    leg_count: int
    get_noise: Callable[[], str]


class PetOwner(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pet: Animal


class Dog:
    leg_count = 4

    def get_noise(self) -> str:
        return "woof"


sneaky_cat_key = Key("sneaky-cat")
cat_lover_key = Key("cat-lover")


def announce(owner: PetOwner) -> PetOwner:
    print(f"Built owner with a {owner.pet.leg_count} legged pet")
    return owner


def main() -> None:
    container = Container()

    container.bind(Animal).to_type(Dog)
    container.bind(PetOwner).with_(Animal).to_factory(lambda pet: {"pet": pet})

    owner = container.resolve(PetOwner)
    print(f"Owner's pet says: {owner.pet.get_noise()}")
    print(f"Same pet on every resolve: {owner.pet is container.resolve(Animal)}")

    # Nothing is bound under sneaky_cat_key yet, so the owner falls back to the dog.
    container.bind(PetOwner, cat_lover_key).with_(dep(Animal, sneaky_cat_key, strict=False)).post_process(
        announce,
    ).to_factory(lambda pet: {"pet": pet})

    cat_lover = container.resolve(PetOwner, cat_lover_key)
    print(f"Cat lover's pet says: {cat_lover.pet.get_noise()}")


if __name__ == "__main__":
    main()
