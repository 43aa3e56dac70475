"""Shared response schemas."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ResponseModel(BaseModel):
    """Serialized from ORM objects, emitted in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class Page(ResponseModel, Generic[T]):
    """List envelope with pagination metadata."""

    items: list[T]
    total: int
    limit: int
    offset: int


class CustomerSummary(ResponseModel):
    id: str
    customer_number: str
    first_name: str | None = None
    last_name: str | None = None
    company_name: str | None = None


class UserSummary(ResponseModel):
    id: str
    first_name: str
    last_name: str


class AddressSummary(ResponseModel):
    id: str
    street: str
    city: str
    state: str
    zip: str
