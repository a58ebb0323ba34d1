"""
DAGWIRE
~~~~~~~~~~~~~~~~~~~~~

Dagwire wires small, explicitly declared providers into a validated object graph.

>>> graph = build_graph([ExampleModule, ConfigurationMap(firstname="Edward", lastname="Snowden")], [Example])
>>> graph.get(Example).get_name()
'Name: Edward Snowden'

Providers are plain values: an output Key, ordered input Keys and a factory.
The graph is validated as a whole before any factory runs,
each key is then resolved lazily, at most once per graph.
"""

from typing import Annotated as Annotated

from ._key import Key as Key
from ._key import Named as Named
from ._key import as_key as as_key
from ._provider import Provider as Provider
from ._provider import ProviderSpec as ProviderSpec
from ._provider import provides as provides
from .config import GraphConfig as GraphConfig
from .graph import Graph as Graph
from .graph import GraphBuilder as GraphBuilder
from .graph import build_graph as build_graph
from .module import Module as Module

VERSION = "0.1.0"

try:
    import graphviz as graphviz  # type: ignore
except ImportError:
    pass
else:
    from .visual import Visualizer as Visualizer
