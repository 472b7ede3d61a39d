from dataclasses import replace

from fastapi import APIRouter, Depends, HTTPException

from gref.algorithms.budget import SearchBudget
from gref.errors import GrefError
from gref.graph.graph_pattern import GraphPattern

from backend.app.api.schemas import ReformulateRequest, ReformulateResponse
from backend.app.dependencies import get_reformulation_service
from backend.app.services.reformulation_service import ReformulationService

router = APIRouter()


@router.post("/", response_model=ReformulateResponse)
def reformulate(
    request: ReformulateRequest,
    service: ReformulationService = Depends(get_reformulation_service),
):
    try:
        query = GraphPattern.create(
            request.query.nodes,
            request.query.edges,
            directed=service.config.match.directed,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    budget = SearchBudget.from_config(service.config.search)
    if request.budget is not None:
        overrides = {
            k: v for k, v in request.budget.model_dump().items() if v is not None
        }
        budget = replace(budget, **overrides)

    try:
        outcome = service.reformulate(query, budget=budget)
    except (GrefError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return outcome.to_dict(limit=request.limit)
