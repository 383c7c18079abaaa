import csv
import io
import logging
from flask import Blueprint, g, request
from sqlalchemy import case, func, update
from outleads.auth.gate import protect
from outleads.extensions import db
from outleads.models import (
    Campaign,
    FirstLevelDisposition,
    Lead,
    LeadPool,
    Product,
    Role,
    SecondLevelDisposition,
    Sector,
)
from outleads.routes.lead.public import normalize_phone
from outleads.schemas import validate_payload
from outleads.schemas.lead import LeadAssign
from outleads.schemas.lead_pool import LeadPoolCreate, LeadPoolUpload
from outleads.services.lead_distribution import distribute_leads
from outleads.utils.crud import CrudConfig, register_crud_routes
from outleads.utils.error_handling import ValidationError, create_success_response, not_found
from outleads.utils.pagination import apply_search, paginate, parse_page_params

logger = logging.getLogger(__name__)

lead_pool_bp = Blueprint('lead_pool', __name__)

POOL_ROLES = [Role.ADMIN, Role.SUPERVISOR]

# Accepted spellings of each upload column
NAME_COLUMNS = ('Full Name', 'full_name', 'name')
PHONE_COLUMNS = ('Phone Number', 'phone_number', 'phone')
SECTOR_COLUMNS = ('Sector', 'sector')
PRODUCT_COLUMNS = ('Product', 'product')


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


def pool_stats(pool_ids):
    """Lead counts per pool: total, assigned, unassigned, called, connected, sales."""
    stats = {pool_id: {'total': 0, 'assigned': 0, 'unassigned': 0, 'called': 0, 'connected': 0, 'sales': 0}
             for pool_id in pool_ids}
    if not pool_ids:
        return stats

    rows = (db.session.query(
                Lead.lead_pool_id,
                func.count(Lead.id),
                _count_where(Lead.assigned_to_id.isnot(None)),
                _count_where(Lead.last_called_at.isnot(None)),
                _count_where(FirstLevelDisposition.name == 'Contacted'),
                _count_where(SecondLevelDisposition.name == 'Sale'),
            )
            .outerjoin(FirstLevelDisposition, Lead.first_level_disposition_id == FirstLevelDisposition.id)
            .outerjoin(SecondLevelDisposition, Lead.second_level_disposition_id == SecondLevelDisposition.id)
            .filter(Lead.lead_pool_id.in_(pool_ids))
            .group_by(Lead.lead_pool_id)
            .all())

    for pool_id, total, assigned, called, connected, sales in rows:
        stats[pool_id] = {
            'total': total,
            'assigned': assigned,
            'unassigned': total - assigned,
            'called': called,
            'connected': connected,
            'sales': sales,
        }
    return stats


def serialize_pool(pool):
    return pool.to_dict(stats=pool_stats([pool.id])[pool.id])


def prepare_pool(data, user):
    if db.session.get(Campaign, data['campaign_id']) is None:
        raise ValidationError("campaignId: Campaign not found")
    data['created_by_id'] = user.id
    return data


lead_pool_crud = CrudConfig(
    model=LeadPool,
    entity_name='Lead pool',
    create_schema=LeadPoolCreate,
    order_by=('created_at', 'desc'),
    search_fields=('name',),
    filter_fields={'campaignId': 'campaign_id'},
    before_create=prepare_pool,
    serializer=serialize_pool,
)

register_crud_routes(lead_pool_bp, '/lead-pools', lead_pool_crud, read_roles=POOL_ROLES,
                     operations=('list', 'get', 'create', 'delete'))


def _load_pool(pool_id):
    pool = db.session.get(LeadPool, pool_id)
    if pool is None:
        raise not_found('Lead pool', pool_id)
    return pool


@lead_pool_bp.route('/lead-pools/<pool_id>/leads', methods=['GET'])
@protect(POOL_ROLES)
def list_pool_leads(pool_id):
    """Leads in a pool. Only unassigned ones unless ``showAll=true``."""
    pool = _load_pool(pool_id)
    params = parse_page_params(request.args, default_limit=50)

    query = Lead.query.filter(Lead.lead_pool_id == pool.id)
    if request.args.get('showAll', 'false').lower() != 'true':
        query = query.filter(Lead.assigned_to_id.is_(None))
    query = apply_search(query, Lead, ('full_name', 'phone_number', 'email'), params.search)

    leads, meta = paginate(query.order_by(Lead.created_at.desc()), params)
    return create_success_response(
        [lead.to_dict(include=('sector', 'products', 'assigned_to', 'dispositions')) for lead in leads],
        meta,
    )


@lead_pool_bp.route('/lead-pools/<pool_id>/distribute', methods=['POST'])
@protect(POOL_ROLES)
def distribute_pool_leads(pool_id):
    pool = _load_pool(pool_id)
    data = validate_payload(LeadAssign, request.get_json(silent=True))
    result = distribute_leads(data['lead_ids'], data['agent_id'], pool_id=pool.id)
    return create_success_response({
        'count': result.count,
        'agentId': result.agent.id,
        'message': f"{result.count} lead(s) assigned to {result.agent.name or result.agent.username} successfully",
    })


def _pick(row, names):
    for name in names:
        value = row.get(name)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def _read_upload_rows():
    """Rows come either as JSON ``{"rows": [...]}`` or as an uploaded CSV file."""
    upload = request.files.get('file')
    if upload is not None:
        try:
            text = upload.read().decode('utf-8-sig')
            rows = list(csv.DictReader(io.StringIO(text)))
        except (UnicodeDecodeError, csv.Error) as e:
            logger.info(f"Rejected lead upload: {str(e)}")
            raise ValidationError("Uploaded file must be UTF-8 CSV")
        if not rows:
            raise ValidationError("Uploaded file contains no rows")
        return rows
    return validate_payload(LeadPoolUpload, request.get_json(silent=True))['rows']


def import_pool_rows(pool, rows):
    """Create pool leads from upload rows, skipping phone numbers already on file."""
    sectors = Sector.query.order_by(Sector.name).all()
    sectors_by_name = {sector.name.lower(): sector for sector in sectors}
    fallback_sector = sectors[0] if sectors else None
    products_by_name = {product.name.lower(): product for product in Product.query.all()}

    phones = {normalize_phone(_pick(row, PHONE_COLUMNS)) for row in rows if _pick(row, PHONE_COLUMNS)}
    seen = {phone for (phone,) in db.session.query(Lead.phone_number).filter(Lead.phone_number.in_(phones))}

    imported, duplicates, error_details = 0, 0, []
    for index, row in enumerate(rows, start=1):
        name = _pick(row, NAME_COLUMNS)
        phone = normalize_phone(_pick(row, PHONE_COLUMNS))
        if not name or not phone:
            error_details.append(f"Row {index}: name and phone number are required")
            continue
        if phone in seen:
            duplicates += 1
            continue

        sector_name = (_pick(row, SECTOR_COLUMNS) or '').lower()
        sector = sectors_by_name.get(sector_name, fallback_sector)
        product = products_by_name.get((_pick(row, PRODUCT_COLUMNS) or '').lower())

        db.session.add(Lead(
            full_name=name,
            phone_number=phone,
            sector_id=sector.id if sector else None,
            campaign_id=pool.campaign_id,
            lead_pool_id=pool.id,
            products=[product] if product else [],
        ))
        seen.add(phone)
        imported += 1

    if imported:
        db.session.execute(
            update(Campaign)
            .where(Campaign.id == pool.campaign_id)
            .values(lead_count=Campaign.lead_count + imported)
            .execution_options(synchronize_session=False)
        )
    db.session.commit()
    return {
        'imported': imported,
        'duplicates': duplicates,
        'errors': len(error_details),
        'errorDetails': error_details,
    }


@lead_pool_bp.route('/lead-pools/<pool_id>/upload', methods=['POST'])
@protect(POOL_ROLES)
def upload_pool_leads(pool_id):
    pool = _load_pool(pool_id)
    summary = import_pool_rows(pool, _read_upload_rows())
    logger.info(f"User {g.current_user.id} uploaded leads to pool {pool.id}: "
                f"{summary['imported']} imported, {summary['duplicates']} duplicates, {summary['errors']} errors")
    return create_success_response(summary, status_code=201 if summary['imported'] else 200)
