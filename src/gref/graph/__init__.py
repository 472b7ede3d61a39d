"""
Graph subsystem for gref.

Defines the immutable labeled graph used for queries, reformulations and
database graphs, together with its line-oriented text format.
"""

from gref.graph.graph_schema import PatternNode, PatternEdge, WILDCARD
from gref.graph.graph_pattern import GraphPattern
from gref.graph.graph_parser import (
    parse_graph,
    parse_database,
    format_graph,
    load_database_text,
)

__all__ = [
    "PatternNode",
    "PatternEdge",
    "WILDCARD",
    "GraphPattern",
    "parse_graph",
    "parse_database",
    "format_graph",
    "load_database_text",
]
