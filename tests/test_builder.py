import logging

import pytest

from dagwire import GraphBuilder, Key, Module, provides
from dagwire.errors import (
    BuilderConsumedError,
    BuilderError,
    CircularDependencyDetectedError,
    DuplicateBindingError,
    DuplicateModuleError,
    DuplicateSupplyError,
    MissingBindingError,
    MissingModuleInstanceError,
    ModuleInstanceMismatchError,
    NotAModuleError,
    UnknownModuleError,
)
from tests.features.names import (
    ConfigModule,
    FirstNameOnlyModule,
    Greeting,
    NameModule,
    make_config,
)


@pytest.fixture
def builder() -> GraphBuilder:
    return GraphBuilder()


class PathModule(Module):
    def __init__(self, path: str):
        self.path = path

    @provides(qualifier="path")
    def provide_path(self) -> str:
        return self.path


def test_duplicate_module(builder: GraphBuilder):
    builder.add_module_type(NameModule)
    with pytest.raises(DuplicateModuleError):
        builder.add_module_type(NameModule)


def test_not_a_module(builder: GraphBuilder):
    with pytest.raises(NotAModuleError):
        builder.add_module_type(dict)  # type: ignore

    with pytest.raises(NotAModuleError):
        builder.add_module_type(Module)


def test_supply_unknown_module(builder: GraphBuilder):
    with pytest.raises(UnknownModuleError):
        builder.supply_instance(ConfigModule, make_config())


def test_duplicate_supply(builder: GraphBuilder):
    builder.add_module_type(ConfigModule)
    builder.supply_instance(ConfigModule, make_config())
    with pytest.raises(DuplicateSupplyError):
        builder.supply_instance(ConfigModule, make_config())


def test_supply_mismatched_instance(builder: GraphBuilder):
    builder.add_module_type(ConfigModule)
    with pytest.raises(ModuleInstanceMismatchError):
        builder.supply_instance(ConfigModule, NameModule())  # type: ignore


def test_missing_module_instance(builder: GraphBuilder):
    builder.add_module_type(PathModule)
    with pytest.raises(MissingModuleInstanceError) as exc_info:
        builder.build([Key(str, "path")])
    assert exc_info.value.module_type is PathModule


def test_supplied_instance_skips_default_construction(builder: GraphBuilder):
    builder.add_module_type(PathModule)
    builder.supply_instance(PathModule, PathModule("/tmp"))

    graph = builder.build([Key(str, "path")])
    assert graph.get(Key(str, "path")) == "/tmp"


def test_default_constructed_modules(builder: GraphBuilder):
    builder.add_module_types(ConfigModule, NameModule)
    graph = builder.build([ConfigModule])

    assert graph.get(ConfigModule) == {}
    assert graph.get(ConfigModule) is graph.module(ConfigModule)


def test_self_provider_collision_is_duplicate(builder: GraphBuilder):
    class FakeConfigModule(Module):
        @provides
        def config(self) -> ConfigModule:
            return make_config()

    builder.add_module_types(ConfigModule, FakeConfigModule)
    with pytest.raises(DuplicateBindingError) as exc_info:
        builder.build([ConfigModule])
    assert exc_info.value.key == Key(ConfigModule)


def test_duplicate_binding_outside_entry_points(builder: GraphBuilder):
    class First(Module):
        @provides
        def number(self) -> int:
            return 1

    class Second(Module):
        @provides
        def number(self) -> int:
            return 2

    builder.add_module_types(ConfigModule, First, Second)
    with pytest.raises(DuplicateBindingError):
        builder.build([ConfigModule])


def test_missing_entry_point_binding(builder: GraphBuilder):
    builder.add_module_type(ConfigModule)
    with pytest.raises(MissingBindingError) as exc_info:
        builder.build([Greeting])
    assert exc_info.value.path == [Key(Greeting)]


def test_builder_single_use(builder: GraphBuilder):
    builder.add_module_type(ConfigModule)
    builder.build([ConfigModule])

    with pytest.raises(BuilderConsumedError):
        builder.build([ConfigModule])
    with pytest.raises(BuilderConsumedError):
        builder.add_module_type(NameModule)
    with pytest.raises(BuilderConsumedError):
        builder.supply_instance(ConfigModule, make_config())


def test_builder_not_reusable_after_failure(builder: GraphBuilder):
    builder.add_module_type(NameModule)
    with pytest.raises(MissingBindingError):
        builder.build([Greeting])

    with pytest.raises(BuilderConsumedError):
        builder.add_module_type(ConfigModule)


def test_builder_errors_share_base():
    for err in (
        DuplicateModuleError,
        UnknownModuleError,
        DuplicateSupplyError,
        MissingModuleInstanceError,
        BuilderConsumedError,
    ):
        assert issubclass(err, BuilderError)


def test_thread_safe_config():
    assert GraphBuilder().config.thread_safe
    assert not GraphBuilder(thread_safe=False).config.thread_safe


def test_build_logs(builder: GraphBuilder, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.DEBUG, logger="dagwire.graph"):
        builder.add_module_type(ConfigModule)
        builder.supply_instance(ConfigModule, make_config())
        builder.build([ConfigModule])

    messages = [r.getMessage() for r in caplog.records]
    assert "registered module ConfigModule" in messages
    assert "supplied instance of module ConfigModule" in messages
    assert any(m.startswith("built Graph(") for m in messages)


def test_repr(builder: GraphBuilder):
    builder.add_module_type(ConfigModule)
    assert repr(builder) == "GraphBuilder(modules=1, supplied=0)"


class Ping:
    pass


class Pong:
    pass


class PingPongModule(Module):
    @provides
    def ping(self, pong: Pong) -> Ping:
        return Ping()

    @provides
    def pong(self, ping: Ping) -> Pong:
        return Pong()


@pytest.mark.parametrize(
    "entry_points, expected",
    [
        ([Greeting, Ping], MissingBindingError),
        ([Ping, Greeting], CircularDependencyDetectedError),
        ([Ping, Greeting, Ping], CircularDependencyDetectedError),
    ],
)
def test_first_entry_point_error_reported(
    entry_points: list[type], expected: type[Exception]
):
    builder = GraphBuilder().add_module_types(
        ConfigModule, FirstNameOnlyModule, PingPongModule
    )
    with pytest.raises(expected):
        builder.build(entry_points)
