from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from gref.errors import DuplicateEdgeViolation, LatticeFrozenError
from gref.graph.graph_pattern import GraphPattern
from gref.lattice.node import NodeScore, ReformulationNode
from gref.matching.equivalence import IsomorphismEquivalence, PatternEquivalence


class ReformulationLattice:
    """
    Partially ordered set of reformulations.

    An edge A -> B means "A generalizes B": every database graph matched
    by B is also matched by A. The root is the original query and the
    lattice grows toward broader patterns. Nodes are unique under the
    injected equivalence; the structure is append-only and becomes
    read-only once frozen.
    """

    def __init__(
        self,
        root: GraphPattern,
        *,
        equivalence: Optional[PatternEquivalence] = None,
    ) -> None:
        self.equivalence = equivalence or IsomorphismEquivalence()
        self._graph = nx.DiGraph()
        self._nodes: List[ReformulationNode] = []
        self._buckets: Dict[str, List[int]] = {}
        self._frozen = False
        self._root = self._add(root, generation=0).id

    # -------------------- Nodes --------------------

    def root(self) -> int:
        return self._root

    def get(self, node_id: int) -> ReformulationNode:
        if not isinstance(node_id, int) or not 0 <= node_id < len(self._nodes):
            raise KeyError(node_id)
        return self._nodes[node_id]

    def nodes(self) -> List[ReformulationNode]:
        return list(self._nodes)

    def find(self, pattern: GraphPattern) -> Optional[int]:
        """
        Id of the node structurally equal to `pattern`, if any.
        """
        for node_id in self._buckets.get(self.equivalence.key(pattern), []):
            if self.equivalence.equal(self._nodes[node_id].pattern, pattern):
                return node_id
        return None

    def insert(
        self,
        pattern: GraphPattern,
        parents: Iterable[int] = (),
        *,
        score: Optional[NodeScore] = None,
    ) -> int:
        """
        Add `pattern` as a generalization of every node in `parents`.

        If an equal node exists its provenance is extended and its id
        returned. Raises DuplicateEdgeViolation, before touching the
        lattice, if a new edge would close a cycle.
        """
        self._require_writable()

        parent_ids = sorted(set(parents))
        for pid in parent_ids:
            self.get(pid)

        existing = self.find(pattern)

        if existing is None:
            if not parent_ids:
                raise ValueError("a new reformulation needs at least one parent")
            generation = min(self._nodes[p].generation for p in parent_ids) + 1
            node = self._add(pattern, generation=generation)
            self._link(node, parent_ids)
            if score is not None:
                node.assign_score(score)
            return node.id

        for pid in parent_ids:
            if pid == existing or self.is_ancestor(pid, existing):
                raise DuplicateEdgeViolation(existing, pid)

        node = self._nodes[existing]
        self._link(node, parent_ids)
        if score is not None and not node.scored:
            node.assign_score(score)
        return existing

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._graph

    # -------------------- Order --------------------

    def neighbors_up(self, node_id: int) -> List[int]:
        """
        Immediate generalizations of `node_id`.
        """
        self.get(node_id)
        return sorted(self._graph.predecessors(node_id))

    def neighbors_down(self, node_id: int) -> List[int]:
        """
        Immediate specializations of `node_id`.
        """
        self.get(node_id)
        return sorted(self._graph.successors(node_id))

    def is_ancestor(self, a: int, b: int) -> bool:
        """
        True iff `a` generalizes `b` transitively.
        """
        self.get(a)
        self.get(b)
        return a != b and nx.has_path(self._graph, a, b)

    def edges(self) -> List[Tuple[int, int]]:
        return sorted(self._graph.edges())

    def provenance_chain(self, node_id: int) -> List[int]:
        """
        Derivation path from the root to `node_id`, following the
        earliest discovered parent at each step.
        """
        chain = [node_id]
        node = self.get(node_id)
        while node.parents:
            node = self._nodes[min(node.parents)]
            chain.append(node.id)
        chain.reverse()
        return chain

    def is_acyclic(self) -> bool:
        return nx.is_directed_acyclic_graph(self._graph)

    # -------------------- Lifecycle --------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        if not self._frozen:
            self._frozen = True
            nx.freeze(self._graph)
            logging.getLogger("gref.lattice").debug(
                "lattice frozen nodes=%s edges=%s",
                len(self._nodes),
                self._graph.number_of_edges(),
            )

    # -------------------- Internals --------------------

    def _require_writable(self) -> None:
        if self._frozen:
            raise LatticeFrozenError("lattice is read-only after the search terminated")

    def _add(self, pattern: GraphPattern, *, generation: int) -> ReformulationNode:
        node = ReformulationNode(
            id=len(self._nodes),
            pattern=pattern,
            generation=generation,
        )
        self._nodes.append(node)
        self._graph.add_node(node.id)
        self._buckets.setdefault(self.equivalence.key(pattern), []).append(node.id)
        return node

    def _link(self, node: ReformulationNode, parent_ids: List[int]) -> None:
        for pid in parent_ids:
            self._graph.add_edge(node.id, pid)
            node.parents.add(pid)
