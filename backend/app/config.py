from dataclasses import dataclass

from dynaconf import Dynaconf
from backend.app.constants import DEFAULTS

from gref.config.settings import (
    MatchConfig,
    GenerationConfig,
    SearchConfig,
    ExportConfig,
    GrefConfig,
)

settings = Dynaconf(
    envvar_prefix="GREF",
    load_dotenv=True,
    settings_files=[],
)
for _key, _value in DEFAULTS.items():
    settings.setdefault(_key, _value)


def _parse_csv(value):
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if isinstance(value, str):
        return tuple(v.strip() for v in value.split(",") if v.strip())
    return None


@dataclass(frozen=True)
class AppConfig:
    # ---------------- App ----------------
    app_name: str = settings.get("APP_NAME", "gref-backend")
    api_prefix: str = settings.get("API_PREFIX", "")

    # ---------------- Data ----------------
    database_path: str = settings.get("DATABASE_PATH", "data/database.txt")

    # ---------------- Gref Policy ----------------
    gref: GrefConfig = GrefConfig(
        match=MatchConfig(
            directed=settings.get("GRAPH_DIRECTED", False),
            matcher=settings.get("MATCHER", "subgraph"),
            wildcard=settings.get("WILDCARD", "*"),
            label_prefilter=settings.get("LABEL_PREFILTER", True),
        ),
        generation=GenerationConfig(
            strategies=_parse_csv(
                settings.get(
                    "GENERATION_STRATEGIES",
                    ["edge_removal", "label_relaxation"],
                )
            ),
            drop_isolated=settings.get("GENERATION_DROP_ISOLATED", True),
            relax_node_labels=settings.get("GENERATION_RELAX_NODE_LABELS", True),
            relax_edge_labels=settings.get("GENERATION_RELAX_EDGE_LABELS", True),
            min_nodes=settings.get("GENERATION_MIN_NODES", 1),
        ),
        search=SearchConfig(
            algorithm=settings.get("SEARCH_ALGORITHM", "best_first"),
            aggregation=settings.get("SEARCH_AGGREGATION", "frequency"),
            max_expansions=settings.get("SEARCH_MAX_EXPANSIONS", 100),
            max_nodes=settings.get("SEARCH_MAX_NODES", 0),
            max_depth=settings.get("SEARCH_MAX_DEPTH", 0),
            timeout_s=settings.get("SEARCH_TIMEOUT_S", 0.0),
            workers=settings.get("SEARCH_WORKERS", 1),
            prune_saturated=settings.get("SEARCH_PRUNE_SATURATED", True),
        ),
        export=ExportConfig(
            output_folder=settings.get("EXPORT_OUTPUT_FOLDER", "OutputData"),
            prefix=settings.get("EXPORT_PREFIX", "results"),
            node_labels_path=settings.get("NODE_LABELS_PATH"),
            edge_labels_path=settings.get("EDGE_LABELS_PATH"),
            separator=settings.get("EXPORT_SEPARATOR", "\t"),
            directed=settings.get("GRAPH_DIRECTED", False),
            max_reformulations=settings.get("EXPORT_MAX_REFORMULATIONS", 0),
        ),
    )
