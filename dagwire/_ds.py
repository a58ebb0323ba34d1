from types import MappingProxyType
from typing import Any, Callable, Iterable, Union

from ._key import Key
from ._provider import Provider
from .errors import (
    CircularDependencyDetectedError,
    DuplicateBindingError,
    MissingBindingError,
)

GraphProviders = dict[Key, Provider]
"""
### mapping a key to the provider bound to it
"""

GraphProvidersView = MappingProxyType[Key, Provider]
"""
### a readonly view of GraphProviders
"""

ResolvedValues = dict[Key, Any]
"""
mapping a key to its resolved value, entries are never removed.
"""


class ProviderIndex(dict[Key, Provider]):
    def register(self, provider: Provider) -> None:
        if (current := self.get(provider.output)) is not None:
            raise DuplicateBindingError(provider.output, current, provider)
        self[provider.output] = provider

    def register_all(self, providers: Iterable[Provider]) -> None:
        for provider in providers:
            self.register(provider)


class Visitor:
    __slots__ = ("_providers",)

    def __init__(self, providers: GraphProviders):
        self._providers = providers

    def _visit(
        self,
        start_keys: Union[list[Key], Key],
        pre_visit: Union[Callable[[Key], None], None] = None,
        post_visit: Union[Callable[[Key], None], None] = None,
    ) -> None:
        """Generic DFS traversal with customizable visit callbacks.
        Keys without a provider are skipped, use `validate` to report them.

        Args:
            start_keys: Starting key(s) for traversal
            pre_visit: Called before visiting key's dependencies
            post_visit: Called after visiting key's dependencies
        """
        if isinstance(start_keys, Key):
            start_keys = [start_keys]

        visited = set[Key]()

        def _get_deps(key: Key) -> list[Key]:
            return [k for k in self._providers[key].inputs if k in self._providers]

        def dfs(key: Key):
            if key in visited:
                return
            visited.add(key)

            if pre_visit:
                pre_visit(key)

            for dep_key in _get_deps(key):
                dfs(dep_key)

            if post_visit:
                post_visit(key)

        for key in start_keys:
            if key in self._providers:
                dfs(key)

    def get_dependents(self, dependency: Key) -> list[Key]:
        dependents: list[Key] = []

        def collect_dependent(key: Key):
            if dependency in self._providers[key].inputs:
                dependents.append(key)

        self._visit(list(self._providers), pre_visit=collect_dependent)
        return dependents

    def get_dependencies(self, dependent: Key, recursive: bool = False) -> list[Key]:
        if dependent not in self._providers:
            raise MissingBindingError(dependent, [dependent])
        if not recursive:
            return list(dict.fromkeys(self._providers[dependent].inputs))

        def collect_dependencies(k: Key):
            if k != dependent:
                dependencies.append(k)

        dependencies: list[Key] = []
        self._visit(dependent, post_visit=collect_dependencies)
        return dependencies

    def top_sorted_dependencies(self) -> list[Key]:
        "Sort the whole graph, from lowest dependencies to toppest dependents"
        order: list[Key] = []
        self._visit(list(self._providers), post_visit=order.append)
        return order

    def validate(self, entry_points: Iterable[Key]) -> set[Key]:
        """
        Walk the providers reachable from `entry_points` without invoking any factory.

        Returns:
            every key reachable from the entry points.

        Raises:
            MissingBindingError: a required key has no provider.
            CircularDependencyDetectedError: a key is reached again on its own path.
        """
        reachable: set[Key] = set()
        current_path: list[Key] = []

        def dfs(key: Key):
            if key in current_path:
                i = current_path.index(key)
                raise CircularDependencyDetectedError(current_path[i:] + [key])
            if key in reachable:
                return
            if key not in self._providers:
                raise MissingBindingError(key, current_path + [key])

            current_path.append(key)
            for dep_key in self._providers[key].inputs:
                dfs(dep_key)
            current_path.pop()
            reachable.add(key)

        for key in entry_points:
            dfs(key)
        return reachable
