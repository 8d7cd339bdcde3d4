"""Resolution and validation failures.

Demonstrates:
- ShapeWireResolutionError when nothing is bound for a descriptor and key
- ShapeWireValidationError when a factory produces a value of the wrong shape
"""

from typing import Annotated

from pydantic import BaseModel, Field

from shapewire import Container, ShapeWireResolutionError, ShapeWireValidationError

Port = Annotated[int, Field(gt=0, lt=65536)]


class Settings(BaseModel):
    host: str
    port: int


def main() -> None:
    container = Container()

    print("Resolving an unbound descriptor:")
    try:
        container.resolve(Settings)
    except ShapeWireResolutionError as e:
        print(f"  descriptor: {e.descriptor.__name__}, key: {e.key}")

    print("\nResolving a factory that returns an invalid value:")
    container.bind(Port).to_instance(70000)
    container.bind(Settings).with_(Port).to_factory(lambda port: {"host": "localhost", "port": port})
    try:
        container.resolve(Settings)
    except ShapeWireValidationError as e:
        print(f"  phase: {e.phase}")
        for error in e.errors:
            print(f"  {error['loc']}: {error['msg']}")


if __name__ == "__main__":
    main()
