from dataclasses import dataclass
from functools import partial
from inspect import isfunction
from typing import Any, Callable, Optional, Union, overload

from ._key import Key, KeyLike, as_key
from ._type_resolve import infer_inputs, infer_output
from .config import PROVIDES_MARK, SELF_PROVIDER_NAME
from .utils.param_utils import MISSING, Maybe, is_provided
from .utils.typing_utils import T


@dataclass(frozen=True)
class ProviderSpec:
    """
    A provider as declared on a module class, not yet bound to a module instance.

    func receives the module instance first, then the resolved inputs in declared order.
    """

    name: str
    output: Key
    inputs: tuple[Key, ...]
    func: Callable[..., Any]

    def bind(self, module: Any, module_type: type) -> "Provider":
        return Provider(
            output=self.output,
            inputs=self.inputs,
            factory=partial(self.func, module),
            module_type=module_type,
            name=self.name,
        )


@dataclass(frozen=True)
class Provider:
    """
    A recipe producing the value of `output` from the values of `inputs`.

    output: the key this provider binds.
    inputs: ordered keys whose values are passed positionally to `factory`, repeats allowed.
    factory: a callable closing over its module instance.
    module_type: the module this provider was declared in.
    """

    output: Key
    inputs: tuple[Key, ...]
    factory: Callable[..., Any]
    module_type: type
    name: str

    def __str__(self) -> str:
        return f"{self.module_type.__qualname__}.{self.name}"

    @property
    def is_self_provider(self) -> bool:
        return self.name == SELF_PROVIDER_NAME

    def __call__(self, *args: Any) -> Any:
        return self.factory(*args)


def self_provider(module: Any, module_type: type) -> Provider:
    return Provider(
        output=Key(module_type),
        inputs=(),
        factory=lambda: module,
        module_type=module_type,
        name=SELF_PROVIDER_NAME,
    )


def make_spec(
    func: Callable[..., Any],
    output: Maybe[KeyLike] = MISSING,
    inputs: Optional[tuple[KeyLike, ...]] = None,
    qualifier: Optional[str] = None,
    name: Optional[str] = None,
) -> ProviderSpec:
    out_key = as_key(output, qualifier) if is_provided(output) else infer_output(func, qualifier)
    in_keys = tuple(as_key(i) for i in inputs) if inputs is not None else infer_inputs(func)
    return ProviderSpec(
        name=name or func.__name__,
        output=out_key,
        inputs=in_keys,
        func=func,
    )


@overload
def provides(output: Callable[..., T], /) -> Callable[..., T]: ...


@overload
def provides(
    output: Maybe[KeyLike] = MISSING,
    /,
    *inputs: KeyLike,
    qualifier: Optional[str] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]: ...


def provides(
    output: Union[Maybe[KeyLike], Callable[..., Any]] = MISSING,
    /,
    *inputs: KeyLike,
    qualifier: Optional[str] = None,
) -> Any:
    """
    Mark a module method as a provider.

    Keys left out are inferred from annotations, these are equivalent:
    ```
    @provides(Key(str, "firstname"), Key(ConfigurationMap))
    def first_name(self, config): ...

    @provides(qualifier="firstname")
    def first_name(self, config: ConfigurationMap) -> str: ...
    ```
    """
    if isfunction(output) and not inputs and qualifier is None:
        func = output
        setattr(func, PROVIDES_MARK, make_spec(func))
        return func

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        spec = make_spec(func, output, inputs or None, qualifier)
        setattr(func, PROVIDES_MARK, spec)
        return func

    return decorator
