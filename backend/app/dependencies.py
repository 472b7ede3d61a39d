from functools import lru_cache
import logging
from pathlib import Path
from typing import List
import time

from gref.graph.graph_pattern import GraphPattern

from backend.app.config import AppConfig
from backend.app.services.reformulation_service import ReformulationService
from backend.app.loaders.database_loader import load_database


@lru_cache
def get_config() -> AppConfig:
    return AppConfig()


@lru_cache
def get_database() -> List[GraphPattern]:
    logger = logging.getLogger("gref.startup")
    t0 = time.perf_counter()
    config = get_config()

    path = Path(config.database_path)
    if not path.exists():
        logger.warning("[startup] database not found at %s; starting empty", path)
        return []

    graphs = load_database(path, directed=config.gref.match.directed)
    logger.info("[startup] get_database total %.3fs", time.perf_counter() - t0)
    return graphs


@lru_cache
def get_reformulation_service() -> ReformulationService:
    config = get_config()

    t0 = time.perf_counter()
    service = ReformulationService(
        database=get_database(),
        config=config.gref,
    )
    logging.getLogger("gref.startup").info(
        "[startup] reformulation service init in %.3fs",
        time.perf_counter() - t0,
    )
    return service
