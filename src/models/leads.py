from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from src.shared.base import StoreRecord


class LeadRecord(StoreRecord):
    id: str
    name: Optional[str] = Field(default=None, alias="nome")
    email: Optional[str] = None
    whatsapp: Optional[str] = None
    status: Optional[str] = None
    source: Optional[str] = Field(default=None, alias="fonte_referencia")
    created_at: Optional[datetime] = None
