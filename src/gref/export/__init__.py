"""
Result export: results files and graphviz rendering.

Lives at the boundary of the search; nothing in the core imports it.
"""

from gref.export.results_file import (
    GRAPH_SEPARATOR,
    QUERY_SEPARATOR,
    result_group,
    format_results,
    parse_results,
    write_results,
)
from gref.export.dot_writer import DotRenderer, read_label_map, draw_results

__all__ = [
    "GRAPH_SEPARATOR",
    "QUERY_SEPARATOR",
    "result_group",
    "format_results",
    "parse_results",
    "write_results",
    "DotRenderer",
    "read_label_map",
    "draw_results",
]
