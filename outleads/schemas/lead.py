from typing import List, Optional
from pydantic import Field
from outleads.schemas import RequestSchema


class PublicLeadCreate(RequestSchema):
    """Lead submitted from a campaign landing page."""
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    company: str = Field(min_length=1, description="Sector id")
    product_ids: List[str] = Field(alias='productIds', min_length=1)
    campaign_id: Optional[str] = Field(default=None, alias='campaignId')


class LeadUpdate(RequestSchema):
    full_name: Optional[str] = Field(default=None, alias='fullName', min_length=1, max_length=255)
    phone_number: Optional[str] = Field(default=None, alias='phoneNumber', min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    sector_id: Optional[str] = Field(default=None, alias='sectorId')


class DispositionUpdate(RequestSchema):
    first_level_disposition_id: str = Field(alias='firstLevelDispositionId', min_length=1)
    second_level_disposition_id: Optional[str] = Field(default=None, alias='secondLevelDispositionId')
    third_level_disposition_id: Optional[str] = Field(default=None, alias='thirdLevelDispositionId')
    disposition_notes: Optional[str] = Field(default=None, alias='dispositionNotes')


class LeadAssign(RequestSchema):
    lead_ids: List[str] = Field(alias='leadIds', min_length=1)
    agent_id: str = Field(alias='agentId', min_length=1)


class LeadAssignCampaign(RequestSchema):
    campaign_id: str = Field(alias='campaignId', min_length=1)


class AgentLeadCreate(RequestSchema):
    """Lead keyed in by an agent while working a campaign."""
    full_name: str = Field(alias='fullName', min_length=1, max_length=255)
    phone_number: str = Field(alias='phoneNumber', min_length=1, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    product_ids: List[str] = Field(alias='productIds', min_length=1)
    sector_id: Optional[str] = Field(default=None, alias='sectorId')
