from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Sequence

from gref.graph.graph_parser import format_graph, parse_graph
from gref.graph.graph_pattern import GraphPattern
from gref.lattice.node import ReformulationNode
from gref.lattice.reformulation_lattice import ReformulationLattice

GRAPH_SEPARATOR = "<EOG>"
QUERY_SEPARATOR = "<EOQ>"


def result_group(
    lattice: ReformulationLattice,
    ranked: Sequence[ReformulationNode],
    *,
    limit: int = 0,
) -> List[GraphPattern]:
    """
    Query pattern followed by its ranked reformulations (root excluded).
    """
    root = lattice.root()
    reformulations = [n.pattern for n in ranked if n.id != root]
    if limit > 0:
        reformulations = reformulations[:limit]
    return [lattice.get(root).pattern] + reformulations


def format_results(groups: Iterable[Sequence[GraphPattern]]) -> str:
    blocks = []
    for group in groups:
        graphs = [format_graph(pattern, name=str(i)) for i, pattern in enumerate(group)]
        blocks.append(f"\n{GRAPH_SEPARATOR}\n".join(graphs))
    return f"\n{QUERY_SEPARATOR}\n".join(blocks) + "\n"


def parse_results(text: str, *, directed: bool = False) -> List[List[GraphPattern]]:
    """
    Split a results file into per-query groups of graphs.

    Blank chunks and blank queries are dropped, so a group may hold
    fewer graphs than were written; callers check group sizes.
    """
    groups: List[List[GraphPattern]] = []
    for block in text.split(QUERY_SEPARATOR):
        if not block.strip():
            continue
        groups.append(
            [
                parse_graph(chunk.strip(), directed=directed)
                for chunk in block.split(GRAPH_SEPARATOR)
                if chunk.strip()
            ]
        )
    return groups


def write_results(path: Path, groups: Iterable[Sequence[GraphPattern]]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_results(groups), encoding="utf-8")
    return path
