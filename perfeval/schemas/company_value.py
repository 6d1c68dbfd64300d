from typing import Any, List, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ValueBase(BaseModel):
    value_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sort_order: int = Field(0, ge=0)


class ValueCreateRequest(ValueBase):
    pass


class ValueUpdateRequest(ValueBase):
    pass


class ValueResponse(ValueBase):
    id: int
    lifecycle_state: str
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ValueReorderRequest(BaseModel):
    value_ids: List[int] = Field(..., min_length=1)


class ValueUsageResponse(BaseModel):
    position_title: str
    department: Optional[str] = None
    weight_percentage: Optional[float] = None


class ValueScoreRequest(BaseModel):
    """Behavior ratings; entries that are not 1-5 numbers are ignored."""
    ratings: List[Any] = []


class ValueStatisticsResponse(BaseModel):
    total_evaluations: int
    average_score: Optional[float] = None
    min_score: Optional[float] = None
    max_score: Optional[float] = None
    high_performers: int = 0
    low_performers: int = 0


class ValueSummaryResponse(ValueStatisticsResponse):
    value_id: int
    value_name: str
    description: Optional[str] = None
    sort_order: Optional[int] = None


class ValueImportResultResponse(BaseModel):
    imported: int = 0
    skipped: int = 0
    errors: List[str] = []
