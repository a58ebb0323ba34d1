"""
Infer provider keys from annotations, so that a provider declared as

```
@provides()
def greeting(self, first: Annotated[str, Named("firstname")]) -> Greeting: ...
```

needs no explicit keys.
"""

from inspect import Parameter, Signature
from typing import Any, Callable, Optional, get_type_hints

from ._key import Key, as_key
from .errors import MissingAnnotationError

_POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


def get_type_hints_lenient(func: Callable[..., Any]) -> dict[str, Any]:
    """
    resolve string annotations against the function's globals,
    unresolvable ones are left out and reported as missing by the caller
    """
    try:
        return get_type_hints(func, include_extras=True)
    except NameError:
        return {
            name: annt
            for name, annt in getattr(func, "__annotations__", {}).items()
            if not isinstance(annt, str)
        }


def provider_params(func: Callable[..., Any]) -> list[Parameter]:
    "parameters the graph will fill, the leading module parameter excluded"
    params = list(Signature.from_callable(func).parameters.values())
    return [p for p in params[1:] if p.kind in _POSITIONAL]


def infer_output(func: Callable[..., Any], qualifier: Optional[str] = None) -> Key:
    hints = get_type_hints_lenient(func)
    try:
        annotation = hints["return"]
    except KeyError:
        raise MissingAnnotationError(func.__qualname__, "return")
    return as_key(annotation, qualifier)


def infer_inputs(func: Callable[..., Any]) -> tuple[Key, ...]:
    hints = get_type_hints_lenient(func)
    inputs: list[Key] = []
    for param in provider_params(func):
        try:
            annotation = hints[param.name]
        except KeyError:
            raise MissingAnnotationError(func.__qualname__, param.name)
        inputs.append(as_key(annotation))
    return tuple(inputs)
