from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Sequence
import logging

from gref.config.settings import ExportConfig
from gref.errors import LabelMapError
from gref.export.results_file import parse_results
from gref.graph.graph_pattern import GraphPattern

NODE_FORMAT = '\t\t"{node}" [label="{label}"]'
EDGE_FORMAT = '\t\t"{source}" {arrow} "{target}" [label="{label}"]'

SUBGRAPH_TEMPLATE = """\tsubgraph cluster_{id} {{
\t\tlabel = "{name}";
\t\t/* Node definition */
{nodes}
\t\t/* Edge definition */
{edges}
\t}}"""

GRAPH_TEMPLATE = """{kind} g {{
\tsize="8,5"
\tfontname = "Arial"
\tmargin=0.0002

\tedge [
\t\tfontname = "Arial"
\t]

\tnode [
\t\tshape = rectangle,
\t\tfontname = "Arial"
\t\tfontsize = 15,
\t\twidth = 1.15,
\t\theight = 0.58,
\t\tstyle = "rounded,filled",
\t\tfillcolor = white
\t];
\t/* Query and reformulations */
{subgraphs}
}}
"""


def read_label_map(path: Optional[str], separator: str = "\t") -> Dict[str, str]:
    """
    Read a two-column label substitution table.

    A missing file yields an empty map. Lines that do not split into
    exactly two fields raise LabelMapError; duplicate keys keep the last
    value.
    """
    logger = logging.getLogger("gref.export")
    mapping: Dict[str, str] = {}

    if not path:
        return mapping

    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except FileNotFoundError:
        logger.warning("label map file not found: %s", path)
        return mapping

    for line_no, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line:
            continue
        fields = line.split(separator)
        if len(fields) != 2:
            raise LabelMapError(str(path), line_no)
        if fields[0] in mapping:
            logger.warning("inserting duplicate key=%s", fields[0])
        mapping[fields[0]] = fields[1]

    return mapping


class DotRenderer:
    """
    Renders a query and its reformulations as one graphviz document.

    The first graph is the query (cluster `q`, titled `Q`); the i-th
    reformulation becomes cluster `i`, titled `R<i>`.
    """

    def __init__(
        self,
        *,
        directed: bool = False,
        node_labels: Optional[Dict[str, str]] = None,
        edge_labels: Optional[Dict[str, str]] = None,
    ) -> None:
        self.directed = directed
        self.node_labels = node_labels or {}
        self.edge_labels = edge_labels or {}

    def render(self, graphs: Sequence[GraphPattern]) -> str:
        subgraphs = [self._subgraph(i, g) for i, g in enumerate(graphs)]
        return GRAPH_TEMPLATE.format(
            kind="digraph" if self.directed else "graph",
            subgraphs="\n\n".join(subgraphs),
        )

    def _subgraph(self, index: int, graph: GraphPattern) -> str:
        arrow = "->" if self.directed else "--"
        nodes = [
            NODE_FORMAT.format(
                node=f"{index}_{n.id}",
                label=_escape(self.node_labels.get(n.label, n.label)),
            )
            for n in graph.nodes()
        ]
        edges = [
            EDGE_FORMAT.format(
                source=f"{index}_{e.source}",
                arrow=arrow,
                target=f"{index}_{e.target}",
                label=_escape(self.edge_labels.get(e.label, e.label)),
            )
            for e in graph.edges()
        ]
        return SUBGRAPH_TEMPLATE.format(
            id="q" if index == 0 else str(index),
            name="Q" if index == 0 else f"R{index}",
            nodes="\n".join(nodes),
            edges="\n".join(edges),
        )


def draw_results(results_text: str, config: ExportConfig) -> List[Path]:
    """
    Write one `<prefix>_<n>.dot` file per query group of a results file.

    Groups with fewer than two graphs are skipped with an error log.
    """
    logger = logging.getLogger("gref.export")

    renderer = DotRenderer(
        directed=config.directed,
        node_labels=read_label_map(config.node_labels_path, config.separator),
        edge_labels=read_label_map(config.edge_labels_path, config.separator),
    )

    out = Path(config.output_folder)
    if out.exists():
        logger.warning("output folder already exists, it might overwrite some file")
    out.mkdir(parents=True, exist_ok=True)

    written: List[Path] = []
    groups = parse_results(results_text, directed=config.directed)

    for count, graphs in enumerate(groups, start=1):
        if len(graphs) < 2:
            logger.error(
                "result %s must contain at least two graphs; ignored", count
            )
            continue
        path = out / f"{config.prefix}_{count}.dot"
        path.write_text(renderer.render(graphs), encoding="utf-8")
        written.append(path)

    logger.info("wrote %s dot files to %s", len(written), out)
    return written


def _escape(label: str) -> str:
    return label.replace("\\", "\\\\").replace('"', '\\"')
