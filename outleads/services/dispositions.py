import logging
from datetime import datetime
from outleads.extensions import db
from outleads.models import (
    DispositionCategory,
    DispositionHistory,
    FirstLevelDisposition,
    Role,
    SecondLevelDisposition,
    ThirdLevelDisposition,
)
from outleads.utils.error_handling import Forbidden, ValidationError

logger = logging.getLogger(__name__)

FIRST_LEVEL_SEED = ['Contacted', 'Not Contacted']
SECOND_LEVEL_SEED = ['Sale', 'No Sale']
THIRD_LEVEL_SEED = {
    'no_sale': ['Not Interested', 'Price Too High', 'Already Has Solution', 'Needs More Time', 'Budget Constraints'],
    'not_contacted': ['Wrong Number', 'No Answer', 'Voicemail', 'Number Busy', 'Call Back Later'],
}


def _require(model, disposition_id, label):
    if disposition_id is None:
        return None
    disposition = db.session.get(model, disposition_id)
    if disposition is None:
        raise ValidationError(f"{label} disposition not found")
    return disposition


def record_disposition(lead, data, user):
    """Set a lead's current disposition and append a history row in one transaction."""
    if user.role == Role.AGENT and lead.assigned_to_id != user.id:
        raise Forbidden("You can only update leads assigned to you")

    _require(FirstLevelDisposition, data['first_level_disposition_id'], 'First level')
    _require(SecondLevelDisposition, data.get('second_level_disposition_id'), 'Second level')
    _require(ThirdLevelDisposition, data.get('third_level_disposition_id'), 'Third level')

    lead.first_level_disposition_id = data['first_level_disposition_id']
    lead.second_level_disposition_id = data.get('second_level_disposition_id')
    lead.third_level_disposition_id = data.get('third_level_disposition_id')
    lead.disposition_notes = data.get('disposition_notes')
    lead.last_called_at = datetime.utcnow()

    history = DispositionHistory(
        lead_id=lead.id,
        first_level_disposition_id=lead.first_level_disposition_id,
        second_level_disposition_id=lead.second_level_disposition_id,
        third_level_disposition_id=lead.third_level_disposition_id,
        notes=lead.disposition_notes,
        changed_by_id=user.id,
    )
    db.session.add(history)
    db.session.commit()
    logger.info(f"Lead {lead.id} disposition updated by user {user.id}")
    return history


def seed_dispositions():
    """Insert the default disposition tree. Existing entries are left alone."""
    created = 0
    for name in FIRST_LEVEL_SEED:
        if not FirstLevelDisposition.query.filter_by(name=name).first():
            db.session.add(FirstLevelDisposition(name=name))
            created += 1
    for name in SECOND_LEVEL_SEED:
        if not SecondLevelDisposition.query.filter_by(name=name).first():
            db.session.add(SecondLevelDisposition(name=name))
            created += 1
    for category_value, names in THIRD_LEVEL_SEED.items():
        category = DispositionCategory(category_value)
        for name in names:
            if not ThirdLevelDisposition.query.filter_by(name=name, category=category).first():
                db.session.add(ThirdLevelDisposition(name=name, category=category))
                created += 1
    db.session.commit()
    return created
