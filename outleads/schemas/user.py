from typing import List, Literal, Optional
from pydantic import Field, field_validator
from outleads.models.enums import Role, UserStatus
from outleads.schemas import RequestSchema

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class UserUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[str] = Field(default=None, pattern=EMAIL_PATTERN)
    role: Optional[Role] = None
    status: Optional[UserStatus] = None
    sbu_id: Optional[str] = Field(default=None, alias='sbuId')

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, value):
        return Role.parse(value) if value is not None else value


class UserStatusUpdate(RequestSchema):
    status: Literal['ACTIVE', 'REJECTED']


class UserApprove(RequestSchema):
    user_id: str = Field(alias='userId', min_length=1)


class RolePermissionUpdate(RequestSchema):
    role: Role
    permission_ids: List[str] = Field(alias='permissionIds')

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, value):
        return Role.parse(value)
