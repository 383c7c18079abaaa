import uuid
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from outleads.extensions import db
from outleads.models.enums import Role, UserStatus


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = db.Column(db.String(255), unique=True, nullable=False)
    username = db.Column(db.String(255), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)  # local accounts only
    role = db.Column(db.Enum(Role, native_enum=False, length=20), nullable=False, default=Role.AGENT)
    status = db.Column(db.Enum(UserStatus, native_enum=False, length=20), nullable=False, default=UserStatus.PENDING)
    sbu_id = db.Column(db.String(36), db.ForeignKey('sbus.id'), nullable=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    sbu = db.relationship('Sbu', lazy='joined')

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    @property
    def is_active(self):
        return self.status == UserStatus.ACTIVE

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'username': self.username,
            'name': self.name,
            'role': self.role.value if self.role else None,
            'status': self.status.value if self.status else None,
            'sbuId': self.sbu_id,
            'sbu': self.sbu.to_dict() if self.sbu else None,
            'lastLogin': self.last_login.isoformat() if self.last_login else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<User {self.username}>'
