from typing import Optional
from pydantic import Field, field_validator
from outleads.models.enums import Role
from outleads.schemas import RequestSchema


class LoginRequest(RequestSchema):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class OnboardingRequest(RequestSchema):
    sbu_id: str = Field(alias='sbuId', min_length=1)
    role: Role

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, value):
        return Role.parse(value)


class CompleteRegistrationRequest(RequestSchema):
    user_id: str = Field(alias='userId', min_length=1)
    role: Role
    sbu_id: Optional[str] = Field(default=None, alias='sbuId')

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, value):
        return Role.parse(value)
