import logging
import secrets
from flask import Blueprint, g, request
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import Campaign, Lead, Role
from outleads.schemas.campaign import CampaignCreate, CampaignUpdate
from outleads.services.lead_distribution import resolve_agent
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import ValidationError, create_success_response, not_found
from outleads.utils.pagination import apply_search, paginate, parse_page_params

logger = logging.getLogger(__name__)

campaign_bp = Blueprint('campaign', __name__)

CAMPAIGN_ROLES = [Role.ADMIN, Role.SUPERVISOR]
UNIQUE_LINK_LENGTH = 10


def generate_unique_link():
    return secrets.token_urlsafe(UNIQUE_LINK_LENGTH)[:UNIQUE_LINK_LENGTH]


def prepare_campaign(data, user):
    resolve_agent(data['assigned_to_id'])
    data['unique_link'] = generate_unique_link()
    data['created_by_id'] = user.id
    return data


def prepare_campaign_update(campaign, data, user):
    if data.get('assigned_to_id'):
        resolve_agent(data['assigned_to_id'])
    elif 'assigned_to_id' in data:
        raise ValidationError("assignedToId: a campaign must have an assigned agent")
    return data


campaign_crud = CrudConfig(
    model=Campaign,
    entity_name='Campaign',
    create_schema=CampaignCreate,
    update_schema=CampaignUpdate,
    include_relations=('created_by', 'assigned_to'),
    order_by=('created_at', 'desc'),
    search_fields=('campaign_name', 'organization_name'),
    filter_fields={'assignedToId': 'assigned_to_id'},
    before_create=prepare_campaign,
    before_update=prepare_campaign_update,
)

register_crud_routes(campaign_bp, '/campaigns', campaign_crud, read_roles=CAMPAIGN_ROLES)


@campaign_bp.route('/campaigns/<campaign_id>/status', methods=['PUT'])
@protect(CAMPAIGN_ROLES)
def toggle_campaign_status(campaign_id):
    """Flip a campaign between active and inactive, or set it explicitly with ``is_active``."""
    campaign = db.session.get(Campaign, campaign_id)
    if campaign is None:
        raise not_found('Campaign', campaign_id)

    body = request.get_json(silent=True) or {}
    requested = body.get('is_active', body.get('isActive'))
    if requested is not None and not isinstance(requested, bool):
        raise ValidationError("is_active must be a boolean")

    campaign.is_active = (not campaign.is_active) if requested is None else requested
    db.session.commit()
    logger.info(f"Campaign {campaign.id} set to {'active' if campaign.is_active else 'inactive'} "
                f"by user {g.current_user.id}")
    return create_success_response(campaign.to_dict())


@campaign_bp.route('/campaigns/<campaign_id>/leads', methods=['GET'])
@protect(CAMPAIGN_ROLES)
def list_campaign_leads(campaign_id):
    if db.session.get(Campaign, campaign_id) is None:
        raise not_found('Campaign', campaign_id)

    params = parse_page_params(request.args, default_limit=50)
    query = Lead.query.filter(Lead.campaign_id == campaign_id)
    query = apply_search(query, Lead, ('full_name', 'email', 'phone_number'), params.search)
    leads, meta = paginate(query.order_by(Lead.created_at.desc()), params)
    return create_success_response(
        [lead.to_dict(include=('sector', 'products', 'assigned_to')) for lead in leads], meta
    )
