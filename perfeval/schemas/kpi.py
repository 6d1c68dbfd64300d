from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime

from perfeval.models.kpi import TargetPolicy


class KPIBase(BaseModel):
    kpi_name: str = Field(..., min_length=1, max_length=255)
    kpi_description: Optional[str] = None
    measurement_unit: Optional[str] = Field(None, max_length=50)
    category: str = Field(..., min_length=1, max_length=100)
    target_type: TargetPolicy = TargetPolicy.HIGHER_BETTER


class KPICreateRequest(KPIBase):
    pass


class KPIUpdateRequest(KPIBase):
    pass


class KPIResponse(KPIBase):
    id: int
    lifecycle_state: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KPIUsageResponse(BaseModel):
    position_title: str
    department: Optional[str] = None
    target_value: Optional[float] = None
    weight_percentage: Optional[float] = None


class KPIScoreRequest(BaseModel):
    """Score an achieved value without persisting anything."""
    target_value: float
    achieved_value: float
    target_type: str = TargetPolicy.HIGHER_BETTER.value


class ScoreResponse(BaseModel):
    score: float


class KPIStatisticsResponse(BaseModel):
    total_evaluations: int
    average_score: Optional[float] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    average_achieved: Optional[float] = None
    min_achieved: Optional[float] = None
    max_achieved: Optional[float] = None


class StarterKPI(BaseModel):
    kpi_name: str
    kpi_description: str
    measurement_unit: str
    category: str
    target_type: TargetPolicy


class ImportResultResponse(BaseModel):
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[str] = []
