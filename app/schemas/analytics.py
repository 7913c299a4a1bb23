from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class TopProperty(BaseModel):
    title: str
    count: int = Field(..., ge=0)


class LeadsAnalytics(BaseModel):
    """Dashboard summary of a tenant's leads.

    Serialised with the camelCase keys the dashboard charts read.
    """

    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    by_source: Dict[str, int] = Field(default_factory=dict, alias="bySource")
    by_status: Dict[str, int] = Field(default_factory=dict, alias="byStatus")
    conversion_rate: int = Field(0, ge=0, le=100, alias="conversionRate")
    top_properties: List[TopProperty] = Field(default_factory=list, alias="topProperties")


class AnalyticsResponse(BaseModel):
    data: LeadsAnalytics
