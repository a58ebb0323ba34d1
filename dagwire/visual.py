from typing import Union

from graphviz import Digraph

from ._key import Key, KeyLike, as_key
from .graph import Graph


class Visualizer:
    def __init__(
        self,
        graph: Graph,
        dot: "Digraph | None" = None,
        graph_attrs: Union[dict[str, str], None] = None,
    ):
        self._dg = graph
        self._dot = dot
        self._graph_attrs = graph_attrs

    @property
    def dot(self) -> Union["Digraph", None]:
        return self._dot

    @property
    def view(self) -> Union[Digraph, None]:
        return self.make_graph().dot

    def _add_edges(
        self,
        dot: Digraph,
        key: Key,
        node_attr: dict[str, str],
        edge_attr: dict[str, str],
    ) -> None:
        dependencies = self._dg.visitor.get_dependencies(key)
        key_repr = str(key)
        dot.node(key_repr, key_repr, **node_attr)
        for dependency in dependencies:
            dot.edge(key_repr, str(dependency), **edge_attr)

    def make_graph(
        self,
        node_attr: dict[str, str] = {"color": "black"},
        edge_attr: dict[str, str] = {"color": "black"},
    ) -> "Visualizer":
        """Converting Graph to Graphviz visualization, one node per key

        Args:
            node_attr (dict[str, str], optional): Node attributes. Defaults to {"color": "black"}.
            edge_attr (dict[str, str], optional): Edge attributes. Defaults to {"color": "black"}.

        Returns:
            Visualizer: Visualizer instance
        """
        dot = self._dot or Digraph(
            comment="Dependency Graph", graph_attr=self._graph_attrs
        )

        for key in self._dg.providers:
            self._add_edges(dot, key, node_attr, edge_attr)

        return self.__class__(self._dg, dot, self._graph_attrs)

    def make_node(
        self, key: KeyLike, node_attr: dict[str, str], edge_attr: dict[str, str]
    ) -> "Visualizer":
        """
        Create a graphviz graph for a single key and its direct inputs
        """
        key = as_key(key)
        dot = self._dot or Digraph(
            comment=f"Dependency Graph {key}", graph_attr=self._graph_attrs
        )
        self._add_edges(dot, key, node_attr, edge_attr)
        return self.__class__(self._dg, dot, self._graph_attrs)

    def save(self, output_path: str, format: str = "png") -> None:
        # Render the graph
        if not self._dot:
            self.make_graph().save(output_path=output_path, format=format)
            return

        self._dot.render(output_path, format=format, cleanup=True)
