import uuid
from datetime import datetime
from outleads.extensions import db
from outleads.models.enums import Role


class Permission(db.Model):
    __tablename__ = 'permissions'

    id = db.Column(db.String(64), primary_key=True)  # slug, e.g. 'campaigns'
    name = db.Column(db.String(255), nullable=False)

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def __repr__(self):
        return f'<Permission {self.id}>'


class RolePermission(db.Model):
    __tablename__ = 'role_permissions'
    __table_args__ = (
        db.UniqueConstraint('role', 'permission_id', name='uq_role_permission'),
    )

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    role = db.Column(db.Enum(Role, native_enum=False, length=20), nullable=False, index=True)
    permission_id = db.Column(db.String(64), db.ForeignKey('permissions.id'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    permission = db.relationship('Permission', lazy='joined')

    def to_dict(self):
        return {
            'id': self.id,
            'role': self.role.value,
            'permissionId': self.permission_id,
            'permission': self.permission.to_dict() if self.permission else None,
        }

    def __repr__(self):
        return f'<RolePermission {self.role}:{self.permission_id}>'
