from typing import Optional
from pydantic import Field
from outleads.schemas import RequestSchema


class CampaignCreate(RequestSchema):
    campaign_name: str = Field(min_length=1, max_length=255)
    organization_name: str = Field(min_length=1, max_length=255)
    assigned_to_id: str = Field(alias='assignedToId', min_length=1)
    is_active: bool = True


class CampaignUpdate(RequestSchema):
    campaign_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    organization_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    assigned_to_id: Optional[str] = Field(default=None, alias='assignedToId', min_length=1)
    is_active: Optional[bool] = None
