from __future__ import annotations

from typing import Final

DEFAULT_KEY: Final = None
"""The key used when a binding or dependency does not name one."""


class Key:
    """Differentiate multiple providers for the same descriptor.

    Every ``Key`` is unique: two keys created with the same name are still
    different keys, so a key must be shared by reference between the binding
    and the dependency that asks for it.

    Examples:
        .. code-block:: python

            sneaky_cat = Key("sneaky-cat")

            container.bind(Animal, sneaky_cat).to_instance(cat)
            container.resolve(Animal, sneaky_cat)

    Any other hashable object works as a key too; equal objects then select
    the same provider.
    """

    __slots__ = ("name",)

    def __init__(self, name: str = "") -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Key({self.name!r})"
