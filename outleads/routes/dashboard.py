from datetime import datetime, timedelta
from flask import Blueprint, request
from sqlalchemy import func
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import Campaign, Lead, Role
from outleads.utils.error_handling import ValidationError, create_success_response

dashboard_bp = Blueprint('dashboard', __name__)


def _days_param():
    try:
        days = int(request.args.get('days', 30))
    except ValueError:
        raise ValidationError("days must be an integer")
    if not 1 <= days <= 365:
        raise ValidationError("days must be between 1 and 365")
    return days


@dashboard_bp.route('/dashboard', methods=['GET'])
@protect([Role.ADMIN, Role.SUPERVISOR])
def dashboard():
    """Headline numbers: totals, daily lead intake and per-campaign performance."""
    days = _days_param()
    since = datetime.utcnow() - timedelta(days=days)

    day = func.date(Lead.created_at)
    leads_per_day = (db.session.query(day, func.count(Lead.id))
                     .filter(Lead.created_at >= since)
                     .group_by(day)
                     .order_by(day)
                     .all())

    campaigns = Campaign.query.order_by(Campaign.lead_count.desc()).limit(10).all()

    return create_success_response({
        'totalLeads': Lead.query.count(),
        'unassignedLeads': Lead.query.filter(Lead.assigned_to_id.is_(None)).count(),
        'totalCampaigns': Campaign.query.count(),
        'activeCampaigns': Campaign.query.filter_by(is_active=True).count(),
        'leadsPerDay': [{'date': str(when), 'count': count} for when, count in leads_per_day],
        'campaignPerformance': [
            {
                'id': campaign.id,
                'campaign_name': campaign.campaign_name,
                'click_count': campaign.click_count,
                'lead_count': campaign.lead_count,
                'conversionRate': round(campaign.lead_count / campaign.click_count * 100, 2)
                if campaign.click_count else 0.0,
            }
            for campaign in campaigns
        ],
    })
