from typing import Annotated

import pytest

from dagwire import Key, Module, Named, provides
from dagwire._provider import ProviderSpec
from dagwire.config import SELF_PROVIDER_NAME
from dagwire.errors import (
    DuplicateProviderNameError,
    MissingAnnotationError,
    MissingModuleInstanceError,
)
from dagwire.module import default_instance, is_module_type


class Database:
    def __init__(self, url: str):
        self.url = url


class Settings(dict[str, str], Module, self_provide=True):
    pass


class DatabaseModule(Module):
    @provides
    def database(self, url: Annotated[str, Named("url")]) -> Database:
        return Database(url)

    @provides(qualifier="url")
    def url(self, settings: Settings) -> str:
        return settings["url"]

    def helper(self) -> str:
        return "not a provider"


def specs_by_name(module_type: type[Module]) -> dict[str, ProviderSpec]:
    return {spec.name: spec for spec in module_type.provider_specs()}


def test_provides_infers_keys():
    specs = specs_by_name(DatabaseModule)

    assert set(specs) == {"database", "url"}
    assert specs["database"].output == Key(Database)
    assert specs["database"].inputs == (Key(str, "url"),)
    assert specs["url"].output == Key(str, "url")
    assert specs["url"].inputs == (Key(Settings),)


def test_provides_explicit_keys():
    class ExplicitModule(Module):
        @provides(Key(Database, "replica"), Key(str, "url"), Key(str, "url"))
        def replica(self, url, same_url):
            return Database(url + same_url)

    spec = specs_by_name(ExplicitModule)["replica"]
    assert spec.output == Key(Database, "replica")
    assert spec.inputs == (Key(str, "url"), Key(str, "url"))


def test_provides_qualifier_on_explicit_output():
    class QualifiedModule(Module):
        @provides(Database, qualifier="primary")
        def primary(self) -> Database:
            return Database("primary")

    spec = specs_by_name(QualifiedModule)["primary"]
    assert spec.output == Key(Database, "primary")
    assert spec.inputs == ()


def test_missing_return_annotation():
    with pytest.raises(MissingAnnotationError):

        @provides
        def no_return(self):
            return 1


def test_missing_param_annotation():
    with pytest.raises(MissingAnnotationError) as exc_info:

        @provides
        def no_param(self, value) -> int:
            return value

    assert exc_info.value.param_name == "value"


def test_bind_self_provider_first():
    settings = Settings(url="sqlite://")
    providers = Settings.bind(settings)

    assert len(providers) == 1
    self_provider = providers[0]
    assert self_provider.is_self_provider
    assert self_provider.name == SELF_PROVIDER_NAME
    assert self_provider.output == Key(Settings)
    assert self_provider.inputs == ()
    assert self_provider() is settings


def test_bind_closes_over_instance():
    module = DatabaseModule()
    providers = {p.name: p for p in DatabaseModule.bind(module)}

    assert not providers["database"].is_self_provider
    assert providers["database"].module_type is DatabaseModule
    assert providers["database"]("sqlite://").url == "sqlite://"
    assert str(providers["database"]) == "DatabaseModule.database"


def test_subclass_inherits_and_overrides_providers():
    class ReadOnlyModule(DatabaseModule):
        @provides(qualifier="url")
        def url(self) -> str:
            return "sqlite://readonly"

    specs = specs_by_name(ReadOnlyModule)
    assert set(specs) == {"database", "url"}
    assert specs["url"].inputs == ()
    assert specs_by_name(DatabaseModule)["url"].inputs == (Key(Settings),)


def test_plain_attribute_hides_inherited_provider():
    class NoUrlModule(DatabaseModule):
        url = None  # type: ignore

    assert set(specs_by_name(NoUrlModule)) == {"database"}


def test_add_provider():
    class Cycle(Module):
        pass

    spec = Cycle.add_provider(int, [str], lambda module, s: len(s), name="length")

    assert spec.output == Key(int)
    assert spec.inputs == (Key(str),)
    assert specs_by_name(Cycle)["length"] is spec
    assert "length" not in specs_by_name(DatabaseModule)

    with pytest.raises(DuplicateProviderNameError):
        Cycle.add_provider(float, [], lambda module: 1.0, name="length")


def test_add_provider_unnamed_lambdas():
    class Lambdas(Module):
        pass

    Lambdas.add_provider(int, [], lambda module: 1)
    Lambdas.add_provider(float, [], lambda module: 1.0)

    assert len(Lambdas.provider_specs()) == 2


def test_is_module_type():
    assert is_module_type(DatabaseModule)
    assert is_module_type(Settings)
    assert not is_module_type(Module)
    assert not is_module_type(Database)
    assert not is_module_type(DatabaseModule())


def test_default_instance():
    assert isinstance(default_instance(DatabaseModule), DatabaseModule)
    assert default_instance(Settings) == {}

    class NeedsArgs(Module):
        def __init__(self, path: str):
            self.path = path

    with pytest.raises(MissingModuleInstanceError) as exc_info:
        default_instance(NeedsArgs)
    assert "path" in exc_info.value.message

    class Broken(Module):
        def __init__(self):
            raise RuntimeError("boom")

    with pytest.raises(MissingModuleInstanceError) as exc_info:
        default_instance(Broken)
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_add_provider_generated_name_skips_taken_names():
    class Numbers(Module):
        pass

    def number(module: Module) -> int:
        return 1

    first = Numbers.add_provider(int, [], number)
    explicit = Numbers.add_provider(float, [], lambda module: 1.0, name="number_2")
    generated = Numbers.add_provider(complex, [], number)

    specs = specs_by_name(Numbers)
    assert specs["number"] is first
    assert specs["number_2"] is explicit
    assert specs["number_3"] is generated
    assert [spec.output for spec in Numbers.provider_specs()] == [
        Key(int),
        Key(float),
        Key(complex),
    ]
