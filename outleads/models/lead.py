import uuid
from datetime import datetime
from outleads.extensions import db
from outleads.models.product import lead_products


class Lead(db.Model):
    __tablename__ = 'leads'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    full_name = db.Column(db.String(255), nullable=False)
    phone_number = db.Column(db.String(50), nullable=False, index=True)
    email = db.Column(db.String(255), nullable=True)
    sector_id = db.Column(db.String(36), db.ForeignKey('sectors.id'), nullable=True)
    campaign_id = db.Column(db.String(36), db.ForeignKey('campaigns.id'), nullable=True, index=True)
    lead_pool_id = db.Column(db.String(36), db.ForeignKey('lead_pools.id'), nullable=True, index=True)
    assigned_to_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=True, index=True)

    # Current disposition (history lives in disposition_history)
    first_level_disposition_id = db.Column(db.String(36), db.ForeignKey('first_level_dispositions.id'), nullable=True)
    second_level_disposition_id = db.Column(db.String(36), db.ForeignKey('second_level_dispositions.id'), nullable=True)
    third_level_disposition_id = db.Column(db.String(36), db.ForeignKey('third_level_dispositions.id'), nullable=True)
    disposition_notes = db.Column(db.Text, nullable=True)
    last_called_at = db.Column(db.DateTime, nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    sector = db.relationship('Sector')
    campaign = db.relationship('Campaign')
    lead_pool = db.relationship('LeadPool')
    assigned_to = db.relationship('User', foreign_keys=[assigned_to_id])
    products = db.relationship('Product', secondary=lead_products, lazy='selectin')
    first_level_disposition = db.relationship('FirstLevelDisposition')
    second_level_disposition = db.relationship('SecondLevelDisposition')
    third_level_disposition = db.relationship('ThirdLevelDisposition')

    def to_dict(self, include=()):
        data = {
            'id': self.id,
            'fullName': self.full_name,
            'phoneNumber': self.phone_number,
            'email': self.email,
            'sectorId': self.sector_id,
            'campaignId': self.campaign_id,
            'leadPoolId': self.lead_pool_id,
            'assignedToId': self.assigned_to_id,
            'firstLevelDispositionId': self.first_level_disposition_id,
            'secondLevelDispositionId': self.second_level_disposition_id,
            'thirdLevelDispositionId': self.third_level_disposition_id,
            'dispositionNotes': self.disposition_notes,
            'lastCalledAt': self.last_called_at.isoformat() if self.last_called_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'productIds': [product.id for product in self.products],
        }
        if 'sector' in include:
            data['sector'] = self.sector.to_dict() if self.sector else None
        if 'products' in include:
            data['products'] = [product.to_dict() for product in self.products]
        if 'campaign' in include:
            data['campaign'] = {
                'id': self.campaign.id,
                'campaign_name': self.campaign.campaign_name,
            } if self.campaign else None
        if 'assigned_to' in include:
            data['assignedTo'] = {
                'id': self.assigned_to.id,
                'name': self.assigned_to.name,
                'email': self.assigned_to.email,
            } if self.assigned_to else None
        if 'dispositions' in include:
            data['firstLevelDisposition'] = self.first_level_disposition.to_dict() if self.first_level_disposition else None
            data['secondLevelDisposition'] = self.second_level_disposition.to_dict() if self.second_level_disposition else None
            data['thirdLevelDisposition'] = self.third_level_disposition.to_dict() if self.third_level_disposition else None
        return data

    def __repr__(self):
        return f'<Lead {self.full_name}>'
