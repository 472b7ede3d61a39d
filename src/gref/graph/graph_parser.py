"""
Line-oriented graph text format.

    t # <name>
    v <id> <label>
    e <source> <target> <label>

Vertex ids must be declared before edges use them. A database is a
sequence of `t` blocks; a single graph may omit its `t` line.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from gref.errors import GraphParseError
from gref.graph.graph_pattern import GraphPattern


def parse_graph(text: str, *, directed: bool = False) -> GraphPattern:
    graphs = parse_database(text, directed=directed)
    if len(graphs) != 1:
        raise GraphParseError(f"expected exactly one graph, found {len(graphs)}")
    return graphs[0]


def parse_database(text: str, *, directed: bool = False) -> List[GraphPattern]:
    graphs: List[GraphPattern] = []

    name: Optional[str] = None
    labels: List[str] = []
    ids: dict[str, int] = {}
    edges: List[Tuple[int, int, str]] = []
    started = False

    def _flush() -> None:
        if started:
            graphs.append(
                GraphPattern.create(labels, edges, directed=directed, name=name)
            )

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("%"):
            continue

        parts = line.split()
        kind = parts[0]

        if kind == "t":
            _flush()
            name = parts[-1] if len(parts) > 1 and parts[-1] != "#" else None
            labels, ids, edges = [], {}, []
            started = True

        elif kind == "v":
            if len(parts) < 3:
                raise GraphParseError("vertex line needs an id and a label", line_no=line_no)
            if parts[1] in ids:
                raise GraphParseError(f"duplicate vertex id {parts[1]}", line_no=line_no)
            ids[parts[1]] = len(labels)
            labels.append(" ".join(parts[2:]))
            started = True

        elif kind == "e":
            if len(parts) < 4:
                raise GraphParseError("edge line needs two endpoints and a label", line_no=line_no)
            try:
                source, target = ids[parts[1]], ids[parts[2]]
            except KeyError as exc:
                raise GraphParseError(
                    f"edge references undeclared vertex {exc.args[0]}",
                    line_no=line_no,
                ) from exc
            edges.append((source, target, " ".join(parts[3:])))
            started = True

        else:
            raise GraphParseError(f"unknown record type {kind!r}", line_no=line_no)

    _flush()
    return graphs


def format_graph(pattern: GraphPattern, *, name: Optional[str] = None) -> str:
    title = name if name is not None else pattern.name
    lines = [f"t # {title}" if title is not None else "t #"]
    lines.extend(f"v {n.id} {n.label}" for n in pattern.nodes())
    lines.extend(f"e {e.source} {e.target} {e.label}" for e in pattern.edges())
    return "\n".join(lines)


def load_database_text(path: Path, *, directed: bool = False) -> List[GraphPattern]:
    return parse_database(Path(path).read_text(encoding="utf-8"), directed=directed)
