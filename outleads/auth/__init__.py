from outleads.auth.tokens import InvalidTokenError, UserNotFoundError
from outleads.auth.gate import protect

__all__ = ['protect', 'InvalidTokenError', 'UserNotFoundError']
