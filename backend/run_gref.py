import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for _path in (ROOT, ROOT / "src"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from gref.algorithms.budget import SearchBudget  # noqa: E402
from gref.errors import GrefError  # noqa: E402
from gref.export.dot_writer import draw_results  # noqa: E402
from gref.export.results_file import write_results  # noqa: E402
from gref.graph.graph_parser import load_database_text  # noqa: E402

from backend.app.config import AppConfig  # noqa: E402
from backend.app.loaders.database_loader import load_database  # noqa: E402
from backend.app.services.reformulation_service import ReformulationService  # noqa: E402


def build_parser(config: AppConfig) -> argparse.ArgumentParser:
    search = config.gref.search
    export = config.gref.export

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-d", "--directed",
        action="store_true",
        default=config.gref.match.directed,
        help="treat graphs as directed",
    )

    parser = argparse.ArgumentParser(
        prog="gref",
        description="Graph query reformulation over a generalization lattice",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    reformulate = sub.add_parser(
        "reformulate",
        parents=[common],
        help="search reformulations of each query and write a results file",
    )
    reformulate.add_argument("-g", "--database", default=config.database_path,
                             help="graph database (text file or table directory)")
    reformulate.add_argument("-q", "--queries", required=True,
                             help="file containing the query graphs")
    reformulate.add_argument("-o", "--output", default="results.txt",
                             help="results file to write")
    reformulate.add_argument("--max-expansions", type=int, default=search.max_expansions)
    reformulate.add_argument("--max-nodes", type=int, default=search.max_nodes)
    reformulate.add_argument("--max-depth", type=int, default=search.max_depth)
    reformulate.add_argument("--timeout", type=float, default=search.timeout_s)
    reformulate.add_argument("-k", "--top", type=int, default=export.max_reformulations,
                             help="reformulations kept per query (0 = all)")

    draw = sub.add_parser(
        "draw",
        parents=[common],
        help="convert a results file into graphviz files",
    )
    draw.add_argument("-g", "--graphs", required=True,
                      help="results file containing all graphs")
    draw.add_argument("-n", "--node-labels", default=export.node_labels_path,
                      help="mapping between node labels and actual labels")
    draw.add_argument("-e", "--edge-labels", default=export.edge_labels_path,
                      help="mapping between edge labels and actual labels")
    draw.add_argument("-out", "--output-folder", default=export.output_folder,
                      help="name of the folder to store the output")
    draw.add_argument("-sep", "--separator", default=export.separator,
                      help="separator for the mapping files")
    draw.add_argument("-p", "--prefix", default=export.prefix,
                      help="prefix for output files")

    return parser


def run_reformulate(args: argparse.Namespace, config: AppConfig) -> int:
    logger = logging.getLogger("gref.run")

    gref_config = replace(
        config.gref,
        match=replace(config.gref.match, directed=args.directed),
    )
    database = load_database(Path(args.database), directed=args.directed)
    queries = load_database_text(Path(args.queries), directed=args.directed)

    service = ReformulationService(database=database, config=gref_config)
    outcomes = service.reformulate_all(
        queries,
        budget_factory=lambda: SearchBudget(
            max_expansions=args.max_expansions,
            max_nodes=args.max_nodes,
            max_depth=args.max_depth,
            timeout_s=args.timeout,
        ),
    )

    for i, outcome in enumerate(outcomes, start=1):
        report = outcome.report
        logger.info(
            "[query %s] reformulations=%s termination=%s diagnostics=%s",
            i,
            len(outcome.ranked) - 1,
            report.termination.value,
            len(report.diagnostics),
        )

    path = write_results(
        Path(args.output),
        [outcome.group(limit=args.top) for outcome in outcomes],
    )
    logger.info("results written to %s", path)
    return 0


def run_draw(args: argparse.Namespace, config: AppConfig) -> int:
    export = replace(
        config.gref.export,
        output_folder=args.output_folder,
        prefix=args.prefix,
        node_labels_path=args.node_labels,
        edge_labels_path=args.edge_labels,
        separator=args.separator,
        directed=args.directed,
    )
    text = Path(args.graphs).read_text(encoding="utf-8")
    draw_results(text, export)
    return 0


def main(argv=None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("gref.run")
    config = AppConfig()
    args = build_parser(config).parse_args(argv)

    try:
        if args.command == "reformulate":
            return run_reformulate(args, config)
        return run_draw(args, config)
    except (GrefError, OSError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
