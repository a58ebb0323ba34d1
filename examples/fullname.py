"""
Print a formatted full name assembled by a dagwire graph.

Three equivalent wirings are shown:
- the configuration map is filled by the caller and supplied to the builder,
- the configuration map fills itself and is default-constructed by the builder,
- the same providers declared with explicit keys instead of annotations.
"""

from dataclasses import dataclass
from typing import Annotated, Protocol

from dagwire import Graph, GraphBuilder, Key, Module, Named, provides

FIRSTNAME = "firstname"
LASTNAME = "lastname"


class Example(Protocol):
    def get_name(self) -> str: ...


@dataclass(frozen=True)
class FullName:
    first: str
    last: str

    def get_name(self) -> str:
        return f"Name: {self.first} {self.last}"


class ConfigurationMap(dict[str, str], Module, self_provide=True):
    "string settings, injectable as itself"


class DefaultConfigurationMap(ConfigurationMap):
    def __init__(self):
        super().__init__({FIRSTNAME: "Edward", LASTNAME: "Snowden"})


def require(config: ConfigurationMap, name: str) -> str:
    if (value := config.get(name)) is None:
        raise LookupError(f"{name} not set")
    return value


class ExampleModule(Module):
    @provides
    def example(
        self,
        first_name: Annotated[str, Named(FIRSTNAME)],
        last_name: Annotated[str, Named(LASTNAME)],
    ) -> Example:
        return FullName(first_name, last_name)

    @provides(qualifier=FIRSTNAME)
    def first_name(self, config: ConfigurationMap) -> str:
        return require(config, FIRSTNAME)

    @provides(qualifier=LASTNAME)
    def last_name(self, config: ConfigurationMap) -> str:
        return require(config, LASTNAME)


class ExplicitExampleModule(Module):
    @provides(Key(Example), Key(str, FIRSTNAME), Key(str, LASTNAME))
    def example(self, first_name, last_name):
        return FullName(first_name, last_name)

    @provides(Key(str, FIRSTNAME), Key(DefaultConfigurationMap))
    def first_name(self, config):
        return require(config, FIRSTNAME)

    @provides(Key(str, LASTNAME), Key(DefaultConfigurationMap))
    def last_name(self, config):
        return require(config, LASTNAME)


def supplied_graph(config: ConfigurationMap) -> Graph:
    return (
        GraphBuilder()
        .add_module_type(ExampleModule)
        .add_module_type(ConfigurationMap)
        .supply_instance(ConfigurationMap, config)
        .build([Example])
    )


def default_graph() -> Graph:
    return (
        GraphBuilder()
        .add_module_types(ExplicitExampleModule, DefaultConfigurationMap)
        .build([Example])
    )


def main() -> None:
    config = ConfigurationMap()
    config[FIRSTNAME] = "Edward"
    config[LASTNAME] = "Snowden"

    example: Example = supplied_graph(config).get(Example)
    print(example.get_name())


if __name__ == "__main__":
    main()
