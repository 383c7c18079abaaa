import uuid
from datetime import datetime
from sqlalchemy import event
from outleads.extensions import db
from outleads.models.enums import DispositionCategory


class _DispositionLevel:
    """Columns shared by every disposition tier."""
    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    description = db.Column(db.Text, nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'isActive': self.is_active,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


class FirstLevelDisposition(_DispositionLevel, db.Model):
    __tablename__ = 'first_level_dispositions'

    name = db.Column(db.String(255), unique=True, nullable=False)

    def __repr__(self):
        return f'<FirstLevelDisposition {self.name}>'


class SecondLevelDisposition(_DispositionLevel, db.Model):
    __tablename__ = 'second_level_dispositions'

    name = db.Column(db.String(255), unique=True, nullable=False)

    def __repr__(self):
        return f'<SecondLevelDisposition {self.name}>'


class ThirdLevelDisposition(_DispositionLevel, db.Model):
    __tablename__ = 'third_level_dispositions'
    __table_args__ = (
        db.UniqueConstraint('name', 'category', name='uq_third_level_name_category'),
    )

    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.Enum(DispositionCategory, native_enum=False, length=20,
                                 values_callable=lambda enum_cls: [member.value for member in enum_cls]),
                         nullable=False)

    def to_dict(self):
        data = super().to_dict()
        data['category'] = self.category.value if self.category else None
        return data

    def __repr__(self):
        return f'<ThirdLevelDisposition {self.category}:{self.name}>'


class DispositionHistory(db.Model):
    """Audit row written on every disposition change. Rows are never updated."""
    __tablename__ = 'disposition_history'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    lead_id = db.Column(db.String(36), db.ForeignKey('leads.id'), nullable=False, index=True)
    first_level_disposition_id = db.Column(db.String(36), db.ForeignKey('first_level_dispositions.id'), nullable=True)
    second_level_disposition_id = db.Column(db.String(36), db.ForeignKey('second_level_dispositions.id'), nullable=True)
    third_level_disposition_id = db.Column(db.String(36), db.ForeignKey('third_level_dispositions.id'), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    changed_by_id = db.Column(db.String(36), db.ForeignKey('users.id'), nullable=False)
    changed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    first_level_disposition = db.relationship('FirstLevelDisposition')
    second_level_disposition = db.relationship('SecondLevelDisposition')
    third_level_disposition = db.relationship('ThirdLevelDisposition')
    changed_by = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'leadId': self.lead_id,
            'firstLevelDisposition': self.first_level_disposition.to_dict() if self.first_level_disposition else None,
            'secondLevelDisposition': self.second_level_disposition.to_dict() if self.second_level_disposition else None,
            'thirdLevelDisposition': self.third_level_disposition.to_dict() if self.third_level_disposition else None,
            'notes': self.notes,
            'changedBy': {
                'id': self.changed_by.id,
                'name': self.changed_by.name,
                'email': self.changed_by.email,
            } if self.changed_by else None,
            'changedAt': self.changed_at.isoformat() if self.changed_at else None,
        }

    def __repr__(self):
        return f'<DispositionHistory lead={self.lead_id}>'


@event.listens_for(DispositionHistory, 'before_update')
def _reject_history_update(mapper, connection, target):
    raise ValueError("Disposition history rows are append-only")
