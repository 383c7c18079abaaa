import logging
import re
from sqlalchemy import update
from outleads.extensions import db
from outleads.models import Campaign, Lead, Product, Sector
from outleads.routes.lead import lead_bp
from outleads.schemas.lead import PublicLeadCreate
from outleads.utils.crud import CrudConfig, make_crud_handlers
from outleads.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')


def normalize_phone(phone):
    return _WHITESPACE.sub('', phone or '')


def prepare_public_lead(data, user):
    """Resolve the submitted sector, products and campaign into lead columns."""
    sector = db.session.get(Sector, data['company'])
    if sector is None:
        raise ValidationError("Business sector not found. Please select a valid sector.")

    product_ids = list(dict.fromkeys(data['product_ids']))
    products = Product.query.filter(Product.id.in_(product_ids)).all()
    if len(products) != len(product_ids):
        raise ValidationError("One or more product IDs are invalid")

    assigned_to_id = None
    campaign_id = data.get('campaign_id')
    if campaign_id:
        campaign = db.session.get(Campaign, campaign_id)
        if campaign is None or not campaign.is_active:
            raise ValidationError("Campaign not found or no longer active")
        assigned_to_id = campaign.assigned_to_id
        # Committed together with the lead itself
        db.session.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id)
            .values(lead_count=Campaign.lead_count + 1)
            .execution_options(synchronize_session=False)
        )

    return {
        'full_name': data['name'],
        'phone_number': normalize_phone(data['phone']),
        'email': data.get('email'),
        'sector_id': sector.id,
        'products': products,
        'campaign_id': campaign_id or None,
        'assigned_to_id': assigned_to_id,
    }


public_lead_crud = CrudConfig(
    model=Lead,
    entity_name='Lead',
    create_schema=PublicLeadCreate,
    include_relations=('sector', 'products', 'campaign'),
    before_create=prepare_public_lead,
)

public_lead_handlers = make_crud_handlers(public_lead_crud)

lead_bp.add_url_rule('/leads', endpoint='capture_lead', view_func=public_lead_handlers.create, methods=['POST'])
