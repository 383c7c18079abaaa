"""
All-or-nothing assignment of leads to an agent.

The pre-checks only produce precise error messages. The write itself is one
conditional UPDATE that skips already-assigned leads, so two concurrent
distributions can never both claim the same lead: the loser sees a short
row count and its whole batch is rolled back.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import update
from outleads.extensions import db
from outleads.models import Lead, Role, User, UserStatus
from outleads.utils.error_handling import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class DistributionResult:
    count: int
    agent: User


def resolve_agent(agent_id):
    """Return the target user if it is an ACTIVE agent."""
    agent = db.session.get(User, agent_id)
    if agent is None or agent.role != Role.AGENT or agent.status != UserStatus.ACTIVE:
        raise ValidationError("Agent not found or not an active agent")
    return agent


def distribute_leads(lead_ids, agent_id, pool_id=None) -> DistributionResult:
    lead_ids = list(dict.fromkeys(lead_ids))
    if not lead_ids:
        raise ValidationError("Select at least one lead")
    agent = resolve_agent(agent_id)

    conditions = [Lead.id.in_(lead_ids)]
    if pool_id is not None:
        conditions.append(Lead.lead_pool_id == pool_id)

    found = db.session.query(Lead.id, Lead.assigned_to_id).filter(*conditions).all()
    missing = len(lead_ids) - len(found)
    if missing:
        where = "do not belong to this pool" if pool_id is not None else "were not found"
        raise ValidationError(f"{missing} lead(s) {where}")

    already_assigned = sum(1 for _, assigned_to_id in found if assigned_to_id is not None)
    if already_assigned:
        raise ValidationError(
            f"{already_assigned} lead(s) are already assigned to an agent. "
            "Please select only unassigned leads."
        )

    result = db.session.execute(
        update(Lead)
        .where(*conditions, Lead.assigned_to_id.is_(None))
        .values(assigned_to_id=agent.id, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(lead_ids):
        db.session.rollback()
        lost = len(lead_ids) - result.rowcount
        logger.warning(f"Distribution to agent {agent.id} lost a race on {lost} lead(s); rolled back")
        raise ValidationError(f"{lost} lead(s) are already assigned to an agent. No leads were assigned.")

    db.session.commit()
    logger.info(f"Assigned {result.rowcount} lead(s) to agent {agent.id}"
                + (f" from pool {pool_id}" if pool_id else ""))
    return DistributionResult(count=result.rowcount, agent=agent)
