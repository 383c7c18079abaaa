import uuid
from datetime import datetime
from outleads.extensions import db


class LeadPool(db.Model):
    """Holding bucket of uploaded leads waiting to be distributed to agents."""
    __tablename__ = 'lead_pools'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), nullable=False)
    campaign_id = db.Column(db.String(36), db.ForeignKey('campaigns.id'), nullable=False)
    created_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    campaign = db.relationship('Campaign')
    created_by = db.relationship('User')

    def to_dict(self, stats=None):
        data = {
            'id': self.id,
            'name': self.name,
            'campaignId': self.campaign_id,
            'campaign': {
                'id': self.campaign.id,
                'campaign_name': self.campaign.campaign_name,
            } if self.campaign else None,
            'createdById': self.created_by_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if stats is not None:
            data['stats'] = stats
        return data

    def __repr__(self):
        return f'<LeadPool {self.name}>'
