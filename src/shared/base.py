from __future__ import annotations

from pydantic import BaseModel
from pydantic.config import ConfigDict


def to_camel(value: str) -> str:
    parts = value.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class BaseSchema(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoreRecord(BaseModel):
    """Row read from PostgREST; aliases carry the store's column names."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")
