import uuid
from datetime import datetime
from sqlalchemy import event
from outleads.extensions import db
from outleads.models.enums import AuditSeverity


class AuditLog(db.Model):
    """Security and compliance trail. Rows are written once and never changed."""
    __tablename__ = 'audit_logs'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    # No foreign key: failed logins are recorded for unknown users too
    user_id = db.Column(db.String(36), nullable=True, index=True)
    user_email = db.Column(db.String(255), nullable=True)
    user_role = db.Column(db.String(20), nullable=True)
    action = db.Column(db.String(50), nullable=False, index=True)
    resource_type = db.Column(db.String(50), nullable=False, index=True)
    resource_id = db.Column(db.String(64), nullable=True)
    success = db.Column(db.Boolean, nullable=False, default=True)
    error_message = db.Column(db.Text, nullable=True)
    severity = db.Column(db.Enum(AuditSeverity, native_enum=False, length=10), nullable=False,
                         default=AuditSeverity.LOW, index=True)
    details = db.Column(db.JSON, nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'userEmail': self.user_email,
            'userRole': self.user_role,
            'action': self.action,
            'resourceType': self.resource_type,
            'resourceId': self.resource_id,
            'success': self.success,
            'errorMessage': self.error_message,
            'severity': self.severity.value if self.severity else None,
            'details': self.details,
            'ipAddress': self.ip_address,
            'userAgent': self.user_agent,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<AuditLog {self.action} {self.resource_type}>'


@event.listens_for(AuditLog, 'before_update')
def _reject_audit_update(mapper, connection, target):
    raise ValueError("Audit log rows are append-only")
