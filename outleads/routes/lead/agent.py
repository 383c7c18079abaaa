import logging
from flask import g, request
from sqlalchemy import update
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import Campaign, Lead, Product, Role, Sector
from outleads.routes.lead import lead_bp
from outleads.routes.lead.public import normalize_phone
from outleads.schemas import validate_payload
from outleads.schemas.lead import AgentLeadCreate
from outleads.utils.error_handling import (
    Conflict,
    Forbidden,
    ValidationError,
    create_success_response,
    not_found,
)

logger = logging.getLogger(__name__)


def _duplicate_message(existing):
    where = f'in the "{existing.campaign.campaign_name}" campaign' if existing.campaign else 'as a direct lead'
    return f"This phone number already exists {where}. Please check existing leads before adding."


def _resolve_sector(sector_id):
    if sector_id:
        sector = db.session.get(Sector, sector_id)
        if sector is None:
            raise ValidationError("sectorId: Sector not found")
        return sector
    sector = Sector.query.order_by(Sector.created_at.asc()).first()
    if sector is None:
        raise ValidationError("sectorId: no business sector is configured")
    return sector


@lead_bp.route('/agent/campaigns/<campaign_id>/add-lead', methods=['POST'])
@protect([Role.AGENT, Role.SUPERVISOR, Role.ADMIN])
def add_campaign_lead(campaign_id):
    """Capture a lead by hand on a campaign; the lead is assigned to whoever added it."""
    user = g.current_user
    campaign = db.session.get(Campaign, campaign_id)
    if campaign is None:
        raise not_found('Campaign', campaign_id)
    if user.role == Role.AGENT and campaign.assigned_to_id != user.id:
        raise Forbidden("You can only add leads to your assigned campaigns")
    if not campaign.is_active:
        raise ValidationError("Campaign is not active")

    data = validate_payload(AgentLeadCreate, request.get_json(silent=True))
    phone_number = normalize_phone(data['phone_number'])
    existing = Lead.query.filter_by(phone_number=phone_number).first()
    if existing is not None:
        raise Conflict(_duplicate_message(existing))

    product_ids = list(dict.fromkeys(data['product_ids']))
    products = Product.query.filter(Product.id.in_(product_ids)).all()
    if len(products) != len(product_ids):
        raise ValidationError("One or more product IDs are invalid")

    lead = Lead(
        full_name=data['full_name'],
        phone_number=phone_number,
        email=data.get('email'),
        sector_id=_resolve_sector(data.get('sector_id')).id,
        campaign_id=campaign.id,
        assigned_to_id=user.id,
        products=products,
    )
    db.session.add(lead)
    db.session.execute(
        update(Campaign)
        .where(Campaign.id == campaign.id)
        .values(lead_count=Campaign.lead_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    logger.info(f"User {user.id} added lead {lead.id} to campaign {campaign.id}")
    return create_success_response(lead.to_dict(include=('sector', 'products', 'campaign')), status_code=201)
