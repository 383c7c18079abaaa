import uuid
from datetime import datetime
from outleads.extensions import db


class Campaign(db.Model):
    __tablename__ = 'campaigns'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    campaign_name = db.Column(db.String(255), nullable=False)
    organization_name = db.Column(db.String(255), nullable=False)
    unique_link = db.Column(db.String(64), unique=True, nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    click_count = db.Column(db.Integer, nullable=False, default=0)
    lead_count = db.Column(db.Integer, nullable=False, default=0)
    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    assigned_to_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Parents never cascade to children: a referenced campaign cannot be deleted
    created_by = db.relationship('User', foreign_keys=[created_by_id])
    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id])

    def to_dict(self, include=()):
        data = {
            'id': self.id,
            'campaign_name': self.campaign_name,
            'organization_name': self.organization_name,
            'uniqueLink': self.unique_link,
            'is_active': self.is_active,
            'click_count': self.click_count,
            'lead_count': self.lead_count,
            'createdById': self.created_by_id,
            'assignedToId': self.assigned_to_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
        if 'created_by' in include:
            data['createdBy'] = _user_summary(self.created_by)
        if 'assigned_to' in include:
            data['assignedTo'] = _user_summary(self.assigned_to)
        return data

    def __repr__(self):
        return f'<Campaign {self.campaign_name}>'


def _user_summary(user):
    if user is None:
        return None
    return {'id': user.id, 'name': user.name, 'email': user.email}
