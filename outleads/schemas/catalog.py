from typing import Optional
from pydantic import Field
from outleads.schemas import RequestSchema


class NamedCreate(RequestSchema):
    """Body for catalog entries that only carry a name (sectors, SBUs)."""
    name: str = Field(min_length=1, max_length=255)


class NamedUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)


class ProductCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias='parentId')
    category_id: Optional[str] = Field(default=None, alias='categoryId')


class ProductUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    parent_id: Optional[str] = Field(default=None, alias='parentId')
    category_id: Optional[str] = Field(default=None, alias='categoryId')


class CategoryCreate(RequestSchema):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None


class CategoryUpdate(RequestSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
