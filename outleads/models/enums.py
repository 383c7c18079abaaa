import enum


class Role(str, enum.Enum):
    """Closed set of user roles. Access checks compare members, never raw strings."""
    ADMIN = 'ADMIN'
    SUPERVISOR = 'SUPERVISOR'
    AGENT = 'AGENT'
    BSS = 'BSS'
    INFOSEC = 'INFOSEC'

    @classmethod
    def parse(cls, value):
        """Convert a role name (any case) into a Role, raising ValueError if unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown role: {value}") from None


class UserStatus(str, enum.Enum):
    PENDING = 'PENDING'
    ACTIVE = 'ACTIVE'
    APPROVED = 'APPROVED'
    INACTIVE = 'INACTIVE'
    REJECTED = 'REJECTED'
    DELETED = 'DELETED'


class DispositionCategory(str, enum.Enum):
    NO_SALE = 'no_sale'
    NOT_CONTACTED = 'not_contacted'


class AuditSeverity(str, enum.Enum):
    LOW = 'LOW'
    MEDIUM = 'MEDIUM'
    HIGH = 'HIGH'
    CRITICAL = 'CRITICAL'
