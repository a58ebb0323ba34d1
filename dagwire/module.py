from inspect import Parameter, Signature
from typing import Any, Callable, ClassVar, Iterable, Optional

from typing_extensions import TypeGuard

from ._key import KeyLike
from ._provider import Provider, ProviderSpec, make_spec, self_provider
from .config import PROVIDERS_ATTR, PROVIDES_MARK
from .errors import DuplicateProviderNameError, MissingModuleInstanceError

_VARIADIC = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)


class Module:
    """
    A named group of providers, optionally carrying state its providers close over.

    ```
    class ConfigurationMap(dict[str, str], Module, self_provide=True): ...

    class ExampleModule(Module):
        @provides(qualifier=FIRSTNAME)
        def first_name(self, config: ConfigurationMap) -> str:
            return config[FIRSTNAME]
    ```

    With `self_provide=True` the module instance itself is bound under `Key(ModuleType)`,
    which is how externally supplied state becomes injectable.
    """

    __providers__: ClassVar[dict[str, ProviderSpec]] = {}
    __self_provide__: ClassVar[bool] = False

    def __init_subclass__(cls, self_provide: Optional[bool] = None, **kwargs: Any):
        super().__init_subclass__(**kwargs)
        if self_provide is not None:
            cls.__self_provide__ = self_provide

        specs: dict[str, ProviderSpec] = {}
        for base in reversed(cls.__mro__[1:]):
            specs.update(vars(base).get(PROVIDERS_ATTR, {}))

        for attr, value in vars(cls).items():
            if spec := getattr(value, PROVIDES_MARK, None):
                specs[attr] = spec
            elif attr in specs:
                # overridden by a plain attribute
                specs.pop(attr)

        setattr(cls, PROVIDERS_ATTR, specs)

    @classmethod
    def add_provider(
        cls,
        output: KeyLike,
        inputs: Iterable[KeyLike],
        factory: Callable[..., Any],
        *,
        name: Optional[str] = None,
    ) -> ProviderSpec:
        """
        Declare a provider programmatically, `factory` is called as `factory(module, *inputs)`.
        """
        specs: dict[str, ProviderSpec] = vars(cls)[PROVIDERS_ATTR]
        if name is None:
            base = name = getattr(factory, "__name__", "provider")
            suffix = len(specs)
            while name in specs:
                name = f"{base}_{suffix}"
                suffix += 1
        elif name in specs:
            raise DuplicateProviderNameError(cls, name)

        spec = make_spec(factory, output, tuple(inputs), name=name)
        specs[name] = spec
        return spec

    @classmethod
    def provider_specs(cls) -> list[ProviderSpec]:
        return list(getattr(cls, PROVIDERS_ATTR).values())

    @classmethod
    def bind(cls, instance: "Module") -> list[Provider]:
        "Providers of `instance`, the self-provider first"
        providers: list[Provider] = []
        if cls.__self_provide__:
            providers.append(self_provider(instance, cls))
        providers.extend(spec.bind(instance, cls) for spec in cls.provider_specs())
        return providers


def is_module_type(obj: Any) -> TypeGuard[type[Module]]:
    return isinstance(obj, type) and issubclass(obj, Module) and obj is not Module


def default_instance(module_type: type[Module]) -> Module:
    """
    Construct a module without arguments, as done for every module that was not supplied.
    """
    try:
        sig: Optional[Signature] = Signature.from_callable(module_type)
    except (TypeError, ValueError):
        # builtin bases such as dict carry no signature
        sig = None

    if sig is not None:
        required = [
            p.name
            for p in sig.parameters.values()
            if p.default is Parameter.empty and p.kind not in _VARIADIC
        ]
        if required:
            raise MissingModuleInstanceError(
                module_type, f"constructor requires {', '.join(required)}"
            )

    try:
        return module_type()
    except Exception as exc:
        raise MissingModuleInstanceError(module_type, repr(exc)) from exc
