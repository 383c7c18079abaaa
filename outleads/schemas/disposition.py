from typing import Optional
from pydantic import Field
from outleads.models.enums import DispositionCategory
from outleads.schemas import RequestSchema


class SecondLevelCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = Field(default=True, alias='isActive')


class SecondLevelUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias='isActive')


class ThirdLevelCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    category: DispositionCategory
    description: Optional[str] = None
    is_active: bool = Field(default=True, alias='isActive')


class ThirdLevelUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[DispositionCategory] = None
    description: Optional[str] = None
    is_active: Optional[bool] = Field(default=None, alias='isActive')
