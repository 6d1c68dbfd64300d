import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from perfeval.core.deps import get_actor, get_value_service
from perfeval.schemas.company_value import (
    ValueCreateRequest,
    ValueImportResultResponse,
    ValueReorderRequest,
    ValueResponse,
    ValueScoreRequest,
    ValueStatisticsResponse,
    ValueSummaryResponse,
    ValueUpdateRequest,
    ValueUsageResponse,
)
from perfeval.schemas.kpi import ScoreResponse
from perfeval.services.values import ValueService

router = APIRouter(prefix="/values", tags=["Company Values"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[ValueResponse])
def list_values(service: ValueService = Depends(get_value_service)):
    """List active company values in display order."""
    return service.list_values()


@router.post("/", status_code=201, response_model=ValueResponse)
def create_value(
    request: ValueCreateRequest,
    service: ValueService = Depends(get_value_service),
    actor: Optional[int] = Depends(get_actor),
):
    value_id = service.create_value(request.model_dump(), actor)
    return service.get_value(value_id)


@router.post("/reorder")
def reorder_values(
    request: ValueReorderRequest,
    service: ValueService = Depends(get_value_service),
    actor: Optional[int] = Depends(get_actor),
):
    """
    Set the display order. The first id gets sort_order 1, the next 2, and
    so on. Either all positions are saved or none.
    """
    reordered = service.reorder_values(request.value_ids, actor)
    return {"reordered": reordered}


@router.post("/score", response_model=ScoreResponse)
def calculate_value_score(request: ValueScoreRequest, service: ValueService = Depends(get_value_service)):
    return ScoreResponse(score=service.calculate_value_score(request.ratings))


@router.get("/statistics", response_model=List[ValueSummaryResponse])
def get_all_values_statistics(
    period_start: Optional[date] = Query(None),
    period_end: Optional[date] = Query(None),
    service: ValueService = Depends(get_value_service),
):
    """Summary for every active value, including values with no results yet."""
    return service.get_all_values_statistics(period_start, period_end)


@router.post("/import", response_model=ValueImportResultResponse)
async def import_values(
    file: UploadFile = File(...),
    service: ValueService = Depends(get_value_service),
    actor: Optional[int] = Depends(get_actor),
):
    """Import values from CSV columns: Value Name, Description, Sort Order."""
    content = await file.read()
    logger.info(f"Importing company values from {file.filename} ({len(content)} bytes)")
    return service.import_values_from_csv(content, actor)


@router.get("/export")
def export_values(service: ValueService = Depends(get_value_service)):
    return Response(
        content=service.export_values_to_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="company_values.csv"'},
    )


@router.get("/{value_id}", response_model=ValueResponse)
def get_value(value_id: int, service: ValueService = Depends(get_value_service)):
    return service.get_value(value_id)


@router.put("/{value_id}", response_model=ValueResponse)
def update_value(
    value_id: int,
    request: ValueUpdateRequest,
    service: ValueService = Depends(get_value_service),
    actor: Optional[int] = Depends(get_actor),
):
    service.update_value(value_id, request.model_dump(), actor)
    return service.get_value(value_id)


@router.delete("/{value_id}", status_code=204)
def delete_value(
    value_id: int,
    service: ValueService = Depends(get_value_service),
    actor: Optional[int] = Depends(get_actor),
):
    service.delete_value(value_id, actor)
    return Response(status_code=204)


@router.get("/{value_id}/usage", response_model=List[ValueUsageResponse])
def get_value_usage(value_id: int, service: ValueService = Depends(get_value_service)):
    return service.get_value_usage(value_id)


@router.get("/{value_id}/statistics", response_model=ValueStatisticsResponse)
def get_value_statistics(
    value_id: int,
    period_start: Optional[date] = Query(None),
    period_end: Optional[date] = Query(None),
    service: ValueService = Depends(get_value_service),
):
    return service.get_value_statistics(value_id, period_start, period_end)


@router.get("/{value_id}/behaviors", response_model=List[str])
def get_value_behaviors(value_id: int, service: ValueService = Depends(get_value_service)):
    """Behavior indicators managers rate when scoring this value."""
    return service.get_value_behaviors(value_id)
