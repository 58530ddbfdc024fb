from typing import TYPE_CHECKING

import networkx as nx
from networkx import generate_network_text

if TYPE_CHECKING:  # pragma: no cover
    from collections.abc import Iterable

    from networkx import DiGraph


class Topology:
    """Dependency graph of a Flow. Edges point from a dependency to its dependent."""

    def __init__(self, *, digraph: "DiGraph") -> None:
        self.digraph = digraph

    @classmethod
    def from_dependencies(
        cls, dependencies: "dict[str, Iterable[str]]"
    ) -> "Topology":
        digraph = nx.DiGraph()

        for name in dependencies:
            digraph.add_node(name)

        for name, deps in dependencies.items():
            for dep in deps:
                digraph.add_edge(dep, name)

        return cls(digraph=digraph)

    @property
    def cycles(self) -> list[tuple[str, ...]]:
        """Every dependency cycle, shortest first."""
        return sorted(
            (tuple(cycle) for cycle in nx.simple_cycles(self.digraph)), key=len
        )

    @property
    def acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self.digraph)

    def dependencies(self, name: str) -> set[str]:
        """All tasks `name` waits on, directly or transitively."""
        return nx.ancestors(self.digraph, name)

    def __str__(self) -> str:
        return "\n".join(generate_network_text(self.digraph, vertical_chains=True))
