from flask import g, request
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import DispositionHistory, Lead, Role
from outleads.routes.lead import lead_bp
from outleads.schemas import validate_payload
from outleads.schemas.lead import DispositionUpdate
from outleads.services.dispositions import record_disposition
from outleads.utils.error_handling import Forbidden, create_success_response, not_found

DISPOSITION_ROLES = [Role.ADMIN, Role.SUPERVISOR, Role.AGENT]


def _load_lead(lead_id):
    lead = db.session.get(Lead, lead_id)
    if lead is None:
        raise not_found('Lead', lead_id)
    return lead


@lead_bp.route('/admin/leads/<lead_id>/disposition', methods=['PUT'])
@protect(DISPOSITION_ROLES)
def update_lead_disposition(lead_id):
    lead = _load_lead(lead_id)
    data = validate_payload(DispositionUpdate, request.get_json(silent=True))
    record_disposition(lead, data, g.current_user)
    return create_success_response(lead.to_dict(include=('dispositions',)))


@lead_bp.route('/admin/leads/<lead_id>/disposition/history', methods=['GET'])
@protect(DISPOSITION_ROLES)
def lead_disposition_history(lead_id):
    """Disposition changes for a lead, newest first."""
    lead = _load_lead(lead_id)
    if g.current_user.role == Role.AGENT and lead.assigned_to_id != g.current_user.id:
        raise Forbidden("You can only view leads assigned to you")

    history = (DispositionHistory.query
               .filter_by(lead_id=lead.id)
               .order_by(DispositionHistory.changed_at.desc())
               .all())
    return create_success_response([entry.to_dict() for entry in history], {'total': len(history)})
