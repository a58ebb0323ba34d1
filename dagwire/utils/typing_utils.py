from typing import Annotated, Any, Hashable, TypeVar, get_args, get_origin

from typing_extensions import TypeGuard

T = TypeVar("T")


def is_annotated(t: Any) -> bool:
    return get_origin(t) is Annotated


def is_hashable(t: Any) -> TypeGuard[Hashable]:
    try:
        hash(t)
    except TypeError:
        return False
    return True


def flatten_annotated(typ: Annotated[Any, Any]) -> list[Any]:
    "Annotated[Annotated[T, Ann1, Ann2], Ann3] -> [T, Ann1, Ann2, Ann3]"
    flattened_metadata: list[Any] = []
    _, *metadata = get_args(typ)

    for item in metadata:
        if get_origin(item) is Annotated:
            flattened_metadata.extend(flatten_annotated(item))
        else:
            flattened_metadata.append(item)
    return flattened_metadata


def type_repr(t: Any) -> str:
    "qualified name of classes and functions, `repr` for everything else"
    return getattr(t, "__qualname__", None) or getattr(t, "__name__", None) or repr(t)
