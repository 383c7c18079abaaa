from typing import Any, Dict, List
from pydantic import Field
from outleads.schemas import RequestSchema


class LeadPoolCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    campaign_id: str = Field(alias='campaignId', min_length=1)


class LeadPoolUpload(RequestSchema):
    rows: List[Dict[str, Any]] = Field(min_length=1)
