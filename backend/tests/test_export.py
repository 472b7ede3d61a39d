import logging

import networkx as nx
import pytest

from gref.algorithms.best_first import BestFirstLatticeAlgorithm
from gref.config.settings import ExportConfig, GenerationConfig
from gref.errors import LabelMapError
from gref.export.dot_writer import DotRenderer, draw_results, read_label_map
from gref.export.results_file import (
    GRAPH_SEPARATOR,
    QUERY_SEPARATOR,
    format_results,
    parse_results,
    result_group,
    write_results,
)
from gref.graph.graph_pattern import GraphPattern
from gref.lattice.reformulation_lattice import ReformulationLattice
from gref.matching.equivalence import IsomorphismEquivalence
from gref.matching.generators import build_generator

from conftest import make_pattern


@pytest.fixture()
def searched(query, database, matcher, aggregator):
    algorithm = BestFirstLatticeAlgorithm(
        matcher=matcher,
        generator=build_generator(GenerationConfig()),
        aggregator=aggregator,
    )
    lattice = ReformulationLattice(query)
    algorithm.set_db(database)
    algorithm.set_lattice(lattice)
    return lattice, algorithm.run()


# -------------------- Results file --------------------


def test_result_group_starts_with_query(searched, query):
    lattice, ranked = searched
    group = result_group(lattice, ranked)

    assert group[0] is query
    assert len(group) == len(ranked)
    assert len(result_group(lattice, ranked, limit=1)) == 2


def test_results_text_layout(query):
    relaxed = make_pattern(["A", "*"], [(0, 1, "x")])
    text = format_results([[query, relaxed], [relaxed, query]])

    assert text.count(QUERY_SEPARATOR) == 1
    assert text.count(GRAPH_SEPARATOR) == 2
    assert text.splitlines()[:4] == ["t # 0", "v 0 A", "v 1 B", "e 0 1 x"]


def test_results_file_round_trip(tmp_path, searched):
    lattice, ranked = searched
    group = result_group(lattice, ranked)

    path = write_results(tmp_path / "out" / "results.txt", [group, group[:2]])
    groups = parse_results(path.read_text(encoding="utf-8"))

    equivalence = IsomorphismEquivalence()
    assert [len(g) for g in groups] == [len(group), 2]
    for original, parsed in zip(group, groups[0]):
        assert equivalence.equal(original, parsed)


def test_blank_queries_are_dropped(query):
    text = format_results([[query, query]]) + QUERY_SEPARATOR + "\n\n"
    assert len(parse_results(text)) == 1


def test_blank_graph_chunks_are_dropped():
    text = "t # 0\nv 0 A\n<EOG>\n\n<EOG>\nt # 1\nv 0 B\n"

    (group,) = parse_results(text)

    assert [g.node_label(0) for g in group] == ["A", "B"]


def test_networkx_patterns_round_trip_through_results():
    g = nx.Graph()
    g.add_node("a")
    g.add_node("b", label="B")
    g.add_edge("a", "b")
    pattern = GraphPattern.from_networkx(g)

    (group,) = parse_results(format_results([[pattern, pattern]]))

    assert IsomorphismEquivalence().equal(group[1], pattern)
    assert [n.label for n in group[0].nodes()] == ["*", "B"]


# -------------------- Label maps --------------------


def test_label_map_reads_pairs(tmp_path):
    path = tmp_path / "nodes.tsv"
    path.write_text("A\tAlpha\nB\tBeta\n\n", encoding="utf-8")

    assert read_label_map(str(path)) == {"A": "Alpha", "B": "Beta"}


def test_label_map_custom_separator_and_duplicates(tmp_path, caplog):
    path = tmp_path / "edges.csv"
    path.write_text("x,first\nx,second\n", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="gref.export"):
        mapping = read_label_map(str(path), ",")

    assert mapping == {"x": "second"}
    assert "duplicate" in caplog.text


def test_missing_label_map_is_empty(tmp_path):
    assert read_label_map(None) == {}
    assert read_label_map(str(tmp_path / "absent.tsv")) == {}


def test_malformed_label_map_line(tmp_path):
    path = tmp_path / "nodes.tsv"
    path.write_text("A\tAlpha\nB\tBeta\textra\n", encoding="utf-8")

    with pytest.raises(LabelMapError) as info:
        read_label_map(str(path))

    assert info.value.line_no == 2


# -------------------- DOT rendering --------------------


def test_dot_undirected_document(query):
    relaxed = make_pattern(["A", "*"], [(0, 1, "x")])
    dot = DotRenderer(node_labels={"A": "Alpha"}).render([query, relaxed])

    assert dot.startswith("graph g {")
    assert "subgraph cluster_q" in dot
    assert 'label = "Q";' in dot
    assert "subgraph cluster_1" in dot
    assert 'label = "R1";' in dot
    assert '"0_0" [label="Alpha"]' in dot
    assert '"1_1" [label="*"]' in dot
    assert '"0_0" -- "0_1" [label="x"]' in dot
    assert "->" not in dot


def test_dot_directed_document():
    a = make_pattern(["A", "B"], [(1, 0, "x")], directed=True)
    b = make_pattern(["A", "B"], [(1, 0, "*")], directed=True)
    dot = DotRenderer(directed=True, edge_labels={"x": "knows"}).render([a, b])

    assert dot.startswith("digraph g {")
    assert '"0_1" -> "0_0" [label="knows"]' in dot
    assert '"1_1" -> "1_0" [label="*"]' in dot


def test_dot_escapes_quotes():
    pattern = make_pattern(['say "hi"'])
    dot = DotRenderer().render([pattern, pattern])

    assert '[label="say \\"hi\\""]' in dot


def test_draw_results_writes_one_file_per_query(tmp_path, query, caplog):
    relaxed = make_pattern(["A", "*"], [(0, 1, "x")])
    text = format_results([[query, relaxed], [query], [relaxed, query, query]])
    config = ExportConfig(output_folder=str(tmp_path / "dot"), prefix="run")

    with caplog.at_level(logging.ERROR, logger="gref.export"):
        written = draw_results(text, config)

    assert [p.name for p in written] == ["run_1.dot", "run_3.dot"]
    assert all(p.exists() for p in written)
    assert not (tmp_path / "dot" / "run_2.dot").exists()
    assert "result 2" in caplog.text
    assert "cluster_2" in written[1].read_text(encoding="utf-8")


def test_draw_results_uses_label_maps(tmp_path, query):
    nodes = tmp_path / "nodes.tsv"
    nodes.write_text("A\tAlpha\n", encoding="utf-8")
    config = ExportConfig(
        output_folder=str(tmp_path / "dot"),
        node_labels_path=str(nodes),
    )

    (path,) = draw_results(format_results([[query, query]]), config)

    assert path.name == "results_1.dot"
    assert '[label="Alpha"]' in path.read_text(encoding="utf-8")
