import logging
from contextlib import nullcontext
from threading import Lock, local
from types import MappingProxyType
from typing import Any, Callable, ContextManager, Iterable, Union

from ._ds import GraphProviders, GraphProvidersView, ProviderIndex, ResolvedValues, Visitor
from ._key import Key, KeyLike, as_key
from .config import DefaultConfig, GraphConfig
from .errors import (
    BuilderConsumedError,
    CircularDependencyDetectedError,
    DuplicateModuleError,
    DuplicateSupplyError,
    ModuleInstanceMismatchError,
    NotAModuleError,
    NotAnEntryPointError,
    ProviderFaultedError,
    UnknownModuleError,
)
from .module import Module, default_instance, is_module_type
from .utils.param_utils import MISSING, is_provided

logger = logging.getLogger(__name__)

ModuleInstances = dict[type[Module], Module]
"""
### mapping a module type to the single instance a graph owns
"""


class GraphBuilder:
    """
    Collects module types and supplied module instances, then validates and emits a `Graph`.

    ```
    config = ConfigurationMap(firstname="Edward", lastname="Snowden")
    graph = (
        GraphBuilder()
        .add_module_type(ExampleModule)
        .add_module_type(ConfigurationMap)
        .supply_instance(ConfigurationMap, config)
        .build([Example])
    )
    graph.get(Example)
    ```

    A builder builds at most once, whether or not `build` succeeded.
    """

    def __init__(self, *, thread_safe: bool = True):
        self._config = GraphConfig(thread_safe=thread_safe)
        self._module_types: list[type[Module]] = []
        self._supplied: ModuleInstances = {}
        self._consumed = False

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"modules={len(self._module_types)}, "
            f"supplied={len(self._supplied)})"
        )

    @property
    def config(self) -> GraphConfig:
        return self._config

    def _check_consumed(self) -> None:
        if self._consumed:
            raise BuilderConsumedError()

    def add_module_type(self, module_type: type[Module]) -> "GraphBuilder":
        self._check_consumed()
        if not is_module_type(module_type):
            raise NotAModuleError(module_type)
        if module_type in self._module_types:
            raise DuplicateModuleError(module_type)

        self._module_types.append(module_type)
        logger.debug("registered module %s", module_type.__qualname__)
        return self

    def add_module_types(self, *module_types: type[Module]) -> "GraphBuilder":
        for module_type in module_types:
            self.add_module_type(module_type)
        return self

    def supply_instance(self, module_type: type[Module], instance: Module) -> "GraphBuilder":
        self._check_consumed()
        if module_type not in self._module_types:
            raise UnknownModuleError(module_type)
        if module_type in self._supplied:
            raise DuplicateSupplyError(module_type)
        if not isinstance(instance, module_type):
            raise ModuleInstanceMismatchError(module_type, instance)

        self._supplied[module_type] = instance
        logger.debug("supplied instance of module %s", module_type.__qualname__)
        return self

    def _instantiate_modules(self) -> ModuleInstances:
        instances: ModuleInstances = {}
        for module_type in self._module_types:
            instance = self._supplied.get(module_type, MISSING)
            instances[module_type] = (
                instance if is_provided(instance) else default_instance(module_type)
            )
        return instances

    def build(self, entry_points: Iterable[KeyLike]) -> "Graph":
        """
        Validate the providers reachable from `entry_points` and emit a Graph.
        No factory is invoked here.

        Raises:
            MissingModuleInstanceError: a module was not supplied and can't be default-constructed.
            DuplicateBindingError: two providers bind the same key.
            MissingBindingError: a required key has no provider.
            CircularDependencyDetectedError: providers depend on each other in a cycle.
        """
        self._check_consumed()
        self._consumed = True

        # walked in the caller's order so the reported error is deterministic
        ordered_entries = tuple(dict.fromkeys(as_key(e) for e in entry_points))
        entry_keys = frozenset(ordered_entries)
        modules = self._instantiate_modules()

        index = ProviderIndex()
        for module_type, instance in modules.items():
            index.register_all(module_type.bind(instance))

        reachable = Visitor(index).validate(ordered_entries)
        graph = Graph(
            providers=dict(index),
            modules=modules,
            entry_points=entry_keys,
            reachable=reachable,
            config=self._config,
        )
        logger.debug("built %r", graph)
        return graph


class Graph:
    """
    A validated container of providers, resolving each key at most once.

    Values are created lazily on `get` and kept for the lifetime of the graph.
    """

    def __init__(
        self,
        *,
        providers: GraphProviders,
        modules: ModuleInstances,
        entry_points: frozenset[Key],
        reachable: Iterable[Key],
        config: GraphConfig = DefaultConfig,
    ):
        self._providers = providers
        self._modules = modules
        self._entry_points = entry_points
        self._config = config
        self._resolved: ResolvedValues = {}
        self._locks: dict[Key, ContextManager[Any]] = {
            key: Lock() if config.thread_safe else nullcontext() for key in reachable
        }
        # keys being resolved by the current thread, outermost first
        self._resolving = local()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"providers={len(self._providers)}, "
            f"entry_points={len(self._entry_points)}, "
            f"resolved={len(self._resolved)})"
        )

    def __contains__(self, key: KeyLike) -> bool:
        return as_key(key) in self._providers

    def __getitem__(self, key: KeyLike) -> Any:
        return self.get(key)

    @property
    def config(self) -> GraphConfig:
        return self._config

    @property
    def entry_points(self) -> frozenset[Key]:
        return self._entry_points

    @property
    def providers(self) -> GraphProvidersView:
        return MappingProxyType(self._providers)

    @property
    def modules(self) -> MappingProxyType[type[Module], Module]:
        return MappingProxyType(self._modules)

    @property
    def visitor(self) -> Visitor:
        return Visitor(self._providers)

    def module(self, module_type: type[Module]) -> Module:
        return self._modules[module_type]

    def is_resolved(self, key: KeyLike) -> bool:
        return as_key(key) in self._resolved

    def get(self, key: KeyLike) -> Any:
        """
        Resolve the value of an entry point.

        Raises:
            NotAnEntryPointError: `key` was not declared in `GraphBuilder.build`.
            ProviderFaultedError: a factory raised while resolving `key` or its inputs.
        """
        key = as_key(key)
        if key not in self._entry_points:
            raise NotAnEntryPointError(key)
        return self._resolve(key)

    def accessor(self, key: KeyLike) -> Callable[[], Any]:
        """
        A zero-argument callable resolving `key`, for handing one entry point to a caller.
        """
        key = as_key(key)
        if key not in self._entry_points:
            raise NotAnEntryPointError(key)

        def access() -> Any:
            return self._resolve(key)

        access.__name__ = access.__qualname__ = str(key)
        return access

    def _resolve(self, key: Key) -> Any:
        if is_provided(resolved := self._resolved.get(key, MISSING)):
            return resolved

        path: list[Key] = self._resolution_path()
        if key in path:
            # a factory re-entered the graph for a key it is itself producing
            raise CircularDependencyDetectedError(path[path.index(key) :] + [key])

        path.append(key)
        try:
            with self._locks[key]:
                # another thread may have resolved it while we waited
                if is_provided(resolved := self._resolved.get(key, MISSING)):
                    return resolved

                provider = self._providers[key]
                args: list[Any] = []
                for dep_key in provider.inputs:
                    try:
                        args.append(self._resolve(dep_key))
                    except ProviderFaultedError as pfe:
                        pfe.add_context(key)
                        raise

                try:
                    value = provider(*args)
                except Exception as exc:
                    raise ProviderFaultedError(key, exc) from exc

                self._resolved[key] = value
                return value
        finally:
            path.pop()

    def _resolution_path(self) -> list[Key]:
        if (path := getattr(self._resolving, "path", None)) is None:
            path = self._resolving.path = []
        return path


def build_graph(
    modules: Iterable[Union[type[Module], Module]],
    entry_points: Iterable[KeyLike],
    *,
    thread_safe: bool = True,
) -> Graph:
    """
    Shortcut over GraphBuilder, module instances in `modules` are supplied for their own type.
    """
    builder = GraphBuilder(thread_safe=thread_safe)
    for module in modules:
        if isinstance(module, Module):
            builder.add_module_type(type(module)).supply_instance(type(module), module)
        else:
            builder.add_module_type(module)
    return builder.build(entry_points)
