import logging
from flask import g, request
from sqlalchemy import update
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import Campaign, Lead, Role
from outleads.routes.lead import lead_bp
from outleads.schemas import validate_payload
from outleads.schemas.lead import LeadAssign, LeadAssignCampaign, LeadUpdate
from outleads.services.lead_distribution import distribute_leads
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import Conflict, ValidationError, create_success_response, not_found

logger = logging.getLogger(__name__)

LEAD_READ_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.AGENT]
LEAD_MANAGER_ROLES = [Role.ADMIN, Role.SUPERVISOR]


def agent_scope(query, user):
    """Agents only ever see the leads assigned to them."""
    if user is not None and user.role == Role.AGENT:
        return query.filter(Lead.assigned_to_id == user.id)
    return query


admin_lead_crud = CrudConfig(
    model=Lead,
    entity_name='Lead',
    update_schema=LeadUpdate,
    include_relations=('sector', 'products', 'campaign', 'assigned_to', 'dispositions'),
    order_by=('created_at', 'desc'),
    search_fields=('full_name', 'email', 'phone_number'),
    filter_fields={
        'campaignId': 'campaign_id',
        'leadPoolId': 'lead_pool_id',
        'assignedToId': 'assigned_to_id',
        'sectorId': 'sector_id',
    },
    scope=agent_scope,
)

register_crud_routes(lead_bp, '/admin/leads', admin_lead_crud,
                     read_roles=LEAD_READ_ROLES, operations=('list', 'get', 'update'))
register_crud_routes(lead_bp, '/admin/leads', admin_lead_crud,
                     read_roles=[Role.ADMIN], operations=('delete',))


@lead_bp.route('/admin/leads/assign', methods=['POST'])
@protect(LEAD_MANAGER_ROLES)
def assign_leads():
    """Assign a batch of unassigned leads to one agent (all or nothing)."""
    data = validate_payload(LeadAssign, request.get_json(silent=True))
    result = distribute_leads(data['lead_ids'], data['agent_id'])
    return create_success_response({
        'count': result.count,
        'agentId': result.agent.id,
        'message': f"{result.count} lead(s) assigned to {result.agent.name or result.agent.username} successfully",
    })


@lead_bp.route('/admin/leads/<lead_id>/assign-campaign', methods=['POST'])
@protect(LEAD_MANAGER_ROLES)
def assign_lead_to_campaign(lead_id):
    data = validate_payload(LeadAssignCampaign, request.get_json(silent=True))

    lead = db.session.get(Lead, lead_id)
    if lead is None:
        raise not_found('Lead', lead_id)
    if lead.campaign_id:
        raise Conflict("Lead is already assigned to a campaign")

    campaign = db.session.get(Campaign, data['campaign_id'])
    if campaign is None:
        raise not_found('Campaign', data['campaign_id'])
    if not campaign.is_active:
        raise ValidationError("Cannot assign a lead to an inactive campaign")

    lead.campaign_id = campaign.id
    if lead.assigned_to_id is None:
        lead.assigned_to_id = campaign.assigned_to_id
    db.session.execute(
        update(Campaign)
        .where(Campaign.id == campaign.id)
        .values(lead_count=Campaign.lead_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    logger.info(f"Lead {lead.id} added to campaign {campaign.id} by user {g.current_user.id}")
    return create_success_response(lead.to_dict(include=('campaign', 'assigned_to')))
