from fastapi import APIRouter, Depends

from backend.app.api.schemas import DatabaseStatsResponse
from backend.app.dependencies import get_config, get_reformulation_service

router = APIRouter()


@router.get("/stats", response_model=DatabaseStatsResponse)
def database_stats(
    service=Depends(get_reformulation_service),
    config=Depends(get_config),
):
    return DatabaseStatsResponse(
        **service.stats(),
        metadata={"database_path": config.database_path},
    )
