DEFAULTS = {
    # Treat database and query graphs as directed
    "GRAPH_DIRECTED": False,
    # Pattern matcher strategy
    "MATCHER": "subgraph",
    # Label that matches any node or edge label
    "WILDCARD": "*",
    # Skip VF2 when label multisets cannot cover the pattern
    "LABEL_PREFILTER": True,
    # Generalization strategies, applied in order
    "GENERATION_STRATEGIES": ["edge_removal", "label_relaxation"],
    # Drop vertices left isolated by an edge removal
    "GENERATION_DROP_ISOLATED": True,
    # Relax vertex labels to the wildcard
    "GENERATION_RELAX_NODE_LABELS": True,
    # Relax edge labels to the wildcard
    "GENERATION_RELAX_EDGE_LABELS": True,
    # Smallest pattern (in vertices) worth proposing
    "GENERATION_MIN_NODES": 1,
    # Frontier policy
    "SEARCH_ALGORITHM": "best_first",
    # Support aggregation policy
    "SEARCH_AGGREGATION": "frequency",
    # Maximum nodes expanded per query (0 = unbounded)
    "SEARCH_MAX_EXPANSIONS": 100,
    # Maximum lattice size per query (0 = unbounded)
    "SEARCH_MAX_NODES": 500,
    # Maximum generation expanded (0 = unbounded)
    "SEARCH_MAX_DEPTH": 0,
    # Wall-clock budget per query in seconds (0 = unbounded)
    "SEARCH_TIMEOUT_S": 30.0,
    # Scoring worker threads
    "SEARCH_WORKERS": 4,
    # Do not expand nodes that already match the whole database
    "SEARCH_PRUNE_SATURATED": True,
    # Folder for dot files
    "EXPORT_OUTPUT_FOLDER": "OutputData",
    # Prefix for dot file names
    "EXPORT_PREFIX": "results",
    # Separator of the label mapping files
    "EXPORT_SEPARATOR": "\t",
    # Reformulations kept per query in results files (0 = all)
    "EXPORT_MAX_REFORMULATIONS": 10,
    # Graph database location (text file or table directory)
    "DATABASE_PATH": "data/database.txt",
}
