from typing import Any, Hashable, Optional, Union, get_args

from .config import QUALIFIER_SEPARATOR, FrozenSlot
from .errors import InvalidKeyError
from .utils.typing_utils import flatten_annotated, is_annotated, is_hashable, type_repr


class Named(FrozenSlot):
    """
    A qualifier mark, used inside `Annotated` to pick one of several bindings of the same type.

    ```
    def provide_greeting(first: Annotated[str, Named("firstname")]) -> Greeting: ...
    ```
    """

    __slots__ = ("name",)

    name: str

    def __init__(self, name: str):
        if not isinstance(name, str):
            raise InvalidKeyError(name, "qualifier must be a string")
        object.__setattr__(self, "name", name)


class Key(FrozenSlot):
    """
    Identity of a binding: a type token plus an optional qualifier name.
    Two keys are equal iff both components are equal.
    """

    __slots__ = ("type", "qualifier")

    type: Hashable
    qualifier: Optional[str]

    def __init__(self, type: Hashable, qualifier: Optional[str] = None):
        if not is_hashable(type):
            raise InvalidKeyError(type)
        if qualifier is not None and not isinstance(qualifier, str):
            raise InvalidKeyError(qualifier, "qualifier must be a string")
        object.__setattr__(self, "type", type)
        object.__setattr__(self, "qualifier", qualifier)

    def __str__(self) -> str:
        name = type_repr(self.type)
        if self.qualifier is None:
            return name
        return f"{name}{QUALIFIER_SEPARATOR}{self.qualifier}"

    def __repr__(self) -> str:
        return f"Key({self})"

    def named(self, qualifier: str) -> "Key":
        return Key(self.type, qualifier)


KeyLike = Union[Key, Hashable]


def as_key(obj: Any, qualifier: Optional[str] = None) -> Key:
    """
    Normalise a key, a type token or `Annotated[T, Named(...)]` into a Key.
    An explicit `qualifier` takes precedence over any `Named` mark.
    """
    if isinstance(obj, Key):
        if qualifier is None or qualifier == obj.qualifier:
            return obj
        return obj.named(qualifier)

    if is_annotated(obj):
        base, *_ = get_args(obj)
        if qualifier is None:
            marks = [m for m in flatten_annotated(obj) if isinstance(m, Named)]
            if marks:
                qualifier = marks[-1].name
        return Key(base, qualifier)

    return Key(obj, qualifier)
