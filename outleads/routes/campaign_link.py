"""
Public redirect for shareable campaign links.

A first visit from a client bumps the campaign's click counter and drops a
24 hour ``campaign_<id>_clicked`` cookie; repeat visits inside that window
only redirect.
"""

import logging
from urllib.parse import urlencode
from flask import Blueprint, current_app, redirect, request
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from outleads.extensions import db
from outleads.models import Campaign

logger = logging.getLogger(__name__)

campaign_link_bp = Blueprint('campaign_link', __name__)


def click_cookie_name(campaign_id):
    return f"campaign_{campaign_id}_clicked"


def landing_url(campaign_id=None):
    base_url = current_app.config['PUBLIC_BASE_URL']
    if campaign_id is None:
        return base_url
    separator = '&' if '?' in base_url else '?'
    return f"{base_url}{separator}{urlencode({'campaignId': campaign_id})}"


@campaign_link_bp.route('/api/campaign/<unique_link>', methods=['GET'])
@campaign_link_bp.route('/campaign/<unique_link>', methods=['GET'])
def follow_campaign_link(unique_link):
    try:
        campaign = Campaign.query.filter_by(unique_link=unique_link).first()
        if campaign is None or not campaign.is_active:
            return redirect(landing_url(), code=302)

        response = redirect(landing_url(campaign.id), code=302)
        cookie_name = click_cookie_name(campaign.id)
        if not request.cookies.get(cookie_name):
            db.session.execute(
                update(Campaign)
                .where(Campaign.id == campaign.id)
                .values(click_count=Campaign.click_count + 1)
                .execution_options(synchronize_session=False)
            )
            db.session.commit()
            response.set_cookie(
                cookie_name,
                'true',
                max_age=current_app.config['CAMPAIGN_CLICK_COOKIE_MAX_AGE'],
                path='/',
                httponly=True,
                samesite='Lax',
            )
        return response
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Failed to track click for campaign link {unique_link}: {str(e)}")
        return redirect(landing_url(), code=302)
