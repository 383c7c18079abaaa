import uuid
from datetime import datetime
from outleads.extensions import db


class ProductCategory(db.Model):
    __tablename__ = 'product_categories'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(255), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self, product_count=None):
        data = {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if product_count is not None:
            data['productCount'] = product_count
        return data

    def __repr__(self):
        return f'<ProductCategory {self.name}>'
