from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple
import time
import logging

import pandas as pd

from gref.graph.graph_parser import load_database_text
from gref.graph.graph_pattern import GraphPattern

NODE_COLUMNS = ("graph_id", "node_id", "label")
EDGE_COLUMNS = ("graph_id", "source", "target", "label")


def load_database(path: Path, *, directed: bool = False) -> List[GraphPattern]:
    """
    Load a graph database from a text file or a table directory.

    A directory must hold `nodes` and `edges` tables as parquet or csv;
    anything else is read as the line-oriented graph text format.
    """
    path = Path(path)
    logger = logging.getLogger("gref.load_database")
    t0 = time.perf_counter()

    if path.is_dir():
        graphs = load_database_tables(path, directed=directed)
    else:
        graphs = load_database_text(path, directed=directed)

    logger.info(
        "loaded graphs=%s from %s in %.3fs",
        len(graphs),
        path,
        time.perf_counter() - t0,
    )
    return graphs


def load_database_tables(table_dir: Path, *, directed: bool = False) -> List[GraphPattern]:
    """
    Build one pattern per `graph_id`, in first-appearance order of the
    nodes table. Edges referencing unknown vertices are skipped.
    """
    logger = logging.getLogger("gref.load_database")

    nodes_df = _read_table(table_dir, "nodes")
    edges_df = _read_table(table_dir, "edges")
    if nodes_df is None:
        raise FileNotFoundError(f"no nodes table in {table_dir}")
    if edges_df is None:
        edges_df = pd.DataFrame(columns=list(EDGE_COLUMNS))

    _require_columns(nodes_df, NODE_COLUMNS, "nodes")
    _require_columns(edges_df, EDGE_COLUMNS, "edges")

    labels: Dict[str, List[str]] = {}
    index: Dict[str, Dict[str, int]] = {}

    for _, row in nodes_df.iterrows():
        gid = str(row["graph_id"])
        ids = index.setdefault(gid, {})
        node_id = str(row["node_id"])
        if node_id in ids:
            raise ValueError(f"graph {gid} declares vertex {node_id} twice")
        ids[node_id] = len(ids)
        labels.setdefault(gid, []).append(str(row["label"]))

    edges: Dict[str, List[Tuple[int, int, str]]] = {gid: [] for gid in labels}
    skipped = 0

    for _, row in edges_df.iterrows():
        gid = str(row["graph_id"])
        ids = index.get(gid, {})
        source, target = ids.get(str(row["source"])), ids.get(str(row["target"]))
        if source is None or target is None:
            skipped += 1
            continue
        edges[gid].append((source, target, str(row["label"])))

    if skipped:
        logger.warning("skipped edges=%s referencing unknown vertices", skipped)

    return [
        GraphPattern.create(labels[gid], edges[gid], directed=directed, name=gid)
        for gid in labels
    ]


def _read_table(table_dir: Path, stem: str) -> Optional[pd.DataFrame]:
    parquet = table_dir / f"{stem}.parquet"
    csv = table_dir / f"{stem}.csv"
    if parquet.exists():
        return pd.read_parquet(parquet)
    if csv.exists():
        return pd.read_csv(csv, dtype=str, keep_default_na=False)
    return None


def _require_columns(df: pd.DataFrame, columns, table: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ValueError(f"{table} table is missing columns {missing}")
