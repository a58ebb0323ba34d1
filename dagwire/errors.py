from typing import Any, Sequence

from .config import PATH_SEPARATOR


def _path_repr(path: Sequence[Any]) -> str:
    return PATH_SEPARATOR.join(str(k) for k in path)


class DagwireError(Exception):
    """
    Base class for all dagwire exceptions.
    """

    def __init__(self, message: str, /):
        self.message = message
        super().__init__(self.message)


# =============== Builder Errors ===============


class BuilderError(DagwireError):
    """
    Base class for configuration errors raised by the graph builder.
    """


class NotAModuleError(BuilderError):
    def __init__(self, module_type: Any):
        self.module_type = module_type
        super().__init__(f"{module_type!r} is not a subclass of dagwire.Module")


class DuplicateModuleError(BuilderError):
    def __init__(self, module_type: type):
        self.module_type = module_type
        super().__init__(f"Module {module_type.__qualname__} is already registered")


class UnknownModuleError(BuilderError):
    def __init__(self, module_type: type):
        self.module_type = module_type
        super().__init__(
            f"Module {module_type.__qualname__} is not registered, "
            "call `add_module_type` before supplying an instance"
        )


class DuplicateSupplyError(BuilderError):
    def __init__(self, module_type: type):
        self.module_type = module_type
        super().__init__(
            f"An instance of module {module_type.__qualname__} was already supplied"
        )


class ModuleInstanceMismatchError(BuilderError):
    def __init__(self, module_type: type, instance: Any):
        self.module_type = module_type
        self.instance = instance
        super().__init__(
            f"Supplied instance {instance!r} is not an instance of module {module_type.__qualname__}"
        )


class MissingModuleInstanceError(BuilderError):
    """
    Raised when a module was neither supplied nor can be default-constructed.
    """

    def __init__(self, module_type: type, reason: str):
        self.module_type = module_type
        super().__init__(
            f"No instance of module {module_type.__qualname__} was supplied "
            f"and it can't be default-constructed: {reason}"
        )


class BuilderConsumedError(BuilderError):
    def __init__(self):
        super().__init__("GraphBuilder has already been used to build a graph")


# =============== Provider Errors ===============


class ProviderError(DagwireError):
    """
    Base class for errors in provider declarations.
    """


class InvalidKeyError(ProviderError):
    def __init__(self, obj: Any, reason: str = "key types must be hashable"):
        self.obj = obj
        super().__init__(f"{obj!r} can't be used as a key, {reason}")


class DuplicateProviderNameError(ProviderError):
    def __init__(self, module_type: type, name: str):
        self.module_type = module_type
        self.name = name
        super().__init__(
            f"Module {module_type.__qualname__} already declares a provider named {name!r}"
        )


class MissingAnnotationError(ProviderError):
    def __init__(self, provider_name: str, param_name: str):
        self.provider_name = provider_name
        self.param_name = param_name
        if param_name == "return":
            detail = "return type must be annotated or the output key given explicitly"
        else:
            detail = f"parameter `{param_name}` must be annotated or the input keys given explicitly"
        super().__init__(f"Unable to infer keys of provider {provider_name}: {detail}")


# =============== Binding Errors ===============


class BindingError(DagwireError):
    """
    Base class for errors found while validating the provider graph.
    """


class DuplicateBindingError(BindingError):
    def __init__(self, key: Any, current: Any, incoming: Any):
        self.key = key
        self.providers = (current, incoming)
        super().__init__(
            f"Key {key} is bound more than once: by {current} and by {incoming}"
        )


class MissingBindingError(BindingError):
    def __init__(self, key: Any, path: Sequence[Any]):
        self.key = key
        self._path = list(path)
        super().__init__(
            f"No provider is bound to {key}, required by: {_path_repr(self._path)}"
        )

    @property
    def path(self) -> list[Any]:
        return self._path


class CircularDependencyDetectedError(BindingError):
    """Raised when a circular dependency is detected in the dependency graph."""

    def __init__(self, cycle_path: Sequence[Any]):
        self._cycle_path = list(cycle_path)
        super().__init__(f"Circular dependency detected: {_path_repr(self._cycle_path)}")

    @property
    def cycle_path(self) -> list[Any]:
        return self._cycle_path


# =============== Graph Errors ===============


class GraphResolveError(DagwireError):
    """
    Base class for errors raised while resolving values from a built graph.
    """


class NotAnEntryPointError(GraphResolveError):
    def __init__(self, key: Any):
        self.key = key
        super().__init__(
            f"{key} is not an entry point of this graph, declare it in `build`"
        )


class ProviderFaultedError(GraphResolveError):
    """
    Raised when a provider's factory raised, the original exception is kept as `cause`.
    """

    def __init__(self, key: Any, cause: BaseException):
        self.key = key
        self.cause = cause
        self.__notes__: list[str] = []
        super().__init__(f"Provider for {key} failed: {cause!r}")

    def add_note(self, note: str) -> None:
        self.__notes__.append(note)

    def add_context(self, dependent: Any) -> None:
        self.add_note(f"-> required by {dependent}")
