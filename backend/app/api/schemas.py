from typing import List, Dict, Any, Optional, Tuple
from pydantic import BaseModel, Field


class PatternPayload(BaseModel):
    nodes: List[str]
    edges: List[Tuple[int, int, str]] = Field(default_factory=list)


class BudgetPayload(BaseModel):
    max_expansions: Optional[int] = None
    max_nodes: Optional[int] = None
    max_depth: Optional[int] = None
    timeout_s: Optional[float] = None


class ReformulateRequest(BaseModel):
    query: PatternPayload
    budget: Optional[BudgetPayload] = None
    limit: int = 0


class ReformulationResult(BaseModel):
    id: int
    score: float
    generation: int
    parents: List[int]
    matched: List[int]
    chain: List[int]
    is_query: bool
    nodes: List[str]
    edges: List[Tuple[int, int, str]]


class DiagnosticPayload(BaseModel):
    kind: str
    message: str
    node_id: Optional[int] = None
    graph_index: Optional[int] = None


class SearchReportPayload(BaseModel):
    termination: str
    expansions: int
    lattice_size: int
    elapsed_s: float
    diagnostics: List[DiagnosticPayload]


class ReformulateResponse(BaseModel):
    results: List[ReformulationResult]
    report: SearchReportPayload


class DatabaseStatsResponse(BaseModel):
    graphs: int
    directed: bool
    avg_nodes: float
    avg_edges: float
    algorithm: str
    aggregation: str
    generators: List[str]
    metadata: Dict[str, Any] = Field(default_factory=dict)
