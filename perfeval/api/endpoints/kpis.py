import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from perfeval.core.deps import get_actor, get_kpi_service
from perfeval.schemas.kpi import (
    ImportResultResponse,
    KPICreateRequest,
    KPIResponse,
    KPIScoreRequest,
    KPIStatisticsResponse,
    KPIUpdateRequest,
    KPIUsageResponse,
    ScoreResponse,
    StarterKPI,
)
from perfeval.services.kpis import KPIService

router = APIRouter(prefix="/kpis", tags=["KPIs"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[KPIResponse])
def list_kpis(
    category: Optional[str] = None,
    service: KPIService = Depends(get_kpi_service),
):
    """List active KPIs ordered by category and name."""
    return service.list_kpis(category)


@router.post("/", status_code=201, response_model=KPIResponse)
def create_kpi(
    request: KPICreateRequest,
    service: KPIService = Depends(get_kpi_service),
    actor: Optional[int] = Depends(get_actor),
):
    kpi_id = service.create_kpi(request.model_dump(mode="json"), actor)
    return service.get_kpi(kpi_id)


@router.get("/categories", response_model=List[str])
def get_categories(service: KPIService = Depends(get_kpi_service)):
    return service.get_categories()


@router.get("/units", response_model=List[str])
def get_measurement_units(service: KPIService = Depends(get_kpi_service)):
    return service.get_measurement_units()


@router.get("/catalog", response_model=List[StarterKPI])
def get_starter_catalog(
    category: Optional[str] = None,
    service: KPIService = Depends(get_kpi_service),
):
    """Starter KPIs a new organization can adopt as-is."""
    return service.get_starter_catalog(category)


@router.post("/score", response_model=ScoreResponse)
def calculate_kpi_score(request: KPIScoreRequest, service: KPIService = Depends(get_kpi_service)):
    """
    Score an achieved value against a target.

    Nothing is stored. Unknown target types score a neutral 3.0.
    """
    return ScoreResponse(
        score=service.calculate_kpi_score(request.target_value, request.achieved_value, request.target_type)
    )


@router.post("/import", response_model=ImportResultResponse)
async def import_kpis(
    file: UploadFile = File(...),
    service: KPIService = Depends(get_kpi_service),
    actor: Optional[int] = Depends(get_actor),
):
    """
    Import KPIs from a CSV file.

    Recognized headers include "KPI Name", "Description", "Measurement Unit",
    "Category" and "Target Type" (plus common aliases). Rows matching an
    existing KPI by name and category update it.
    """
    content = await file.read()
    logger.info(f"Importing KPIs from {file.filename} ({len(content)} bytes)")
    return service.import_kpis_from_csv(content, actor)


@router.get("/export")
def export_kpis(
    category: Optional[str] = None,
    service: KPIService = Depends(get_kpi_service),
):
    return Response(
        content=service.export_kpis_to_csv(category),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="kpis.csv"'},
    )


@router.get("/{kpi_id}", response_model=KPIResponse)
def get_kpi(kpi_id: int, service: KPIService = Depends(get_kpi_service)):
    return service.get_kpi(kpi_id)


@router.put("/{kpi_id}", response_model=KPIResponse)
def update_kpi(
    kpi_id: int,
    request: KPIUpdateRequest,
    service: KPIService = Depends(get_kpi_service),
    actor: Optional[int] = Depends(get_actor),
):
    service.update_kpi(kpi_id, request.model_dump(mode="json"), actor)
    return service.get_kpi(kpi_id)


@router.delete("/{kpi_id}", status_code=204)
def delete_kpi(
    kpi_id: int,
    service: KPIService = Depends(get_kpi_service),
    actor: Optional[int] = Depends(get_actor),
):
    """Archive a KPI. It disappears from listings but past results keep referencing it."""
    service.delete_kpi(kpi_id, actor)
    return Response(status_code=204)


@router.get("/{kpi_id}/usage", response_model=List[KPIUsageResponse])
def get_kpi_usage(kpi_id: int, service: KPIService = Depends(get_kpi_service)):
    return service.get_kpi_usage(kpi_id)


@router.get("/{kpi_id}/statistics", response_model=KPIStatisticsResponse)
def get_kpi_statistics(
    kpi_id: int,
    period_start: Optional[date] = Query(None),
    period_end: Optional[date] = Query(None),
    service: KPIService = Depends(get_kpi_service),
):
    """
    Score statistics for a KPI.

    The period filter applies only when both period_start and period_end are
    given.
    """
    return service.get_kpi_statistics(kpi_id, period_start, period_end)
