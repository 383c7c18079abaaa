"""
Tabular admin reports over a createdAt window.

GET /api/admin/reports/<report_type>?startDate=...&endDate=...

    lead-details          one row per lead with sector, campaign and products
    campaign-performance  clicks against leads actually captured
    user-activity         accounts with last login and campaigns created
"""

import logging
from flask import Blueprint, g, request
from sqlalchemy import func
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import AuditSeverity, Campaign, Lead, Role, User
from outleads.services import audit
from outleads.services.audit import record_audit_event
from outleads.utils.error_handling import ValidationError, create_success_response
from outleads.utils.pagination import apply_date_range, parse_date_range

logger = logging.getLogger(__name__)

report_bp = Blueprint('report', __name__)

NOT_AVAILABLE = 'N/A'


def _isoformat(value):
    return value.isoformat() if value else None


def lead_details_report(start, end):
    query = apply_date_range(Lead.query, Lead.created_at, start, end)
    return [
        {
            'id': lead.id,
            'full_name': lead.full_name,
            'phone_number': lead.phone_number,
            'business_sector': lead.sector.name if lead.sector else NOT_AVAILABLE,
            'campaign': lead.campaign.campaign_name if lead.campaign else NOT_AVAILABLE,
            'products': ', '.join(product.name for product in lead.products),
            'created_at': _isoformat(lead.created_at),
        }
        for lead in query.order_by(Lead.created_at.desc()).all()
    ]


def campaign_performance_report(start, end):
    campaigns = (apply_date_range(Campaign.query, Campaign.created_at, start, end)
                 .order_by(Campaign.created_at.desc())
                 .all())
    # Counted from the leads table rather than the denormalized counter
    lead_counts = dict(
        db.session.query(Lead.campaign_id, func.count(Lead.id))
        .filter(Lead.campaign_id.in_([campaign.id for campaign in campaigns]))
        .group_by(Lead.campaign_id)
        .all()
    ) if campaigns else {}
    return [
        {
            'id': campaign.id,
            'campaign_name': campaign.campaign_name,
            'is_active': campaign.is_active,
            'click_count': campaign.click_count,
            'lead_count': lead_counts.get(campaign.id, 0),
            'created_at': _isoformat(campaign.created_at),
        }
        for campaign in campaigns
    ]


def user_activity_report(start, end):
    users = (apply_date_range(User.query, User.created_at, start, end)
             .order_by(User.created_at.desc())
             .all())
    campaigns_created = dict(
        db.session.query(Campaign.created_by_id, func.count(Campaign.id))
        .filter(Campaign.created_by_id.isnot(None))
        .group_by(Campaign.created_by_id)
        .all()
    )
    return [
        {
            'id': user.id,
            'name': user.name,
            'email': user.email,
            'role': user.role.value,
            'status': user.status.value,
            'last_login': _isoformat(user.last_login) or NOT_AVAILABLE,
            'campaigns_created': campaigns_created.get(user.id, 0),
        }
        for user in users
    ]


REPORTS = {
    'lead-details': lead_details_report,
    'campaign-performance': campaign_performance_report,
    'user-activity': user_activity_report,
}


@report_bp.route('/reports/<report_type>', methods=['GET'])
@protect([Role.ADMIN])
def run_report(report_type):
    build = REPORTS.get(report_type)
    if build is None:
        raise ValidationError(f"Invalid report type: {report_type}. "
                              f"Expected one of: {', '.join(REPORTS)}")

    start, end = parse_date_range(request.args)
    rows = build(start, end)

    record_audit_event(audit.DATA_EXPORT, audit.REPORT, user=g.current_user, resource_id=report_type,
                       severity=AuditSeverity.MEDIUM, details={'rows': len(rows)}, commit=True)
    logger.info(f"User {g.current_user.id} ran {report_type} report ({len(rows)} rows)")
    return create_success_response(rows, {
        'reportType': report_type,
        'total': len(rows),
        'startDate': _isoformat(start),
        'endDate': _isoformat(end),
    })
