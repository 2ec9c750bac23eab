from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field

from src.shared.base import StoreRecord


class MemberRecord(StoreRecord):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = Field(default=None, alias="user_type")
    level: Optional[str] = Field(default=None, alias="nivel")
    active: Optional[bool] = Field(default=True, alias="ativo")
    working_hours: Optional[Dict[str, Any]] = Field(default=None, alias="horario_trabalho")


class GroupRecord(StoreRecord):
    id: str
    supervisor_id: str
    name: Optional[str] = Field(default=None, alias="nome_grupo")


class MembershipRecord(StoreRecord):
    group_id: str = Field(alias="grupo_id")
    member_id: str = Field(alias="usuario_id")
    joined_at: Optional[datetime] = Field(default=None, alias="created_at")
    left_at: Optional[datetime] = None
    member: Optional[MemberRecord] = Field(default=None, alias="usuario")


class LevelRecord(StoreRecord):
    level: str = Field(alias="nivel")
    kind: str = Field(alias="tipo_usuario")
    vendor_quota: Optional[float] = Field(default=None, alias="meta_semanal_vendedor")
    inbound_quota: Optional[float] = Field(default=None, alias="meta_semanal_inbound")
    outbound_quota: Optional[float] = Field(default=None, alias="meta_semanal_outbound")
    weekly_variable: Optional[float] = Field(default=None, alias="variavel_semanal")
    monthly_fixed: Optional[float] = Field(default=None, alias="fixo_mensal")


class CommissionRuleRecord(StoreRecord):
    id: Optional[str] = None
    kind: str = Field(alias="tipo_usuario")
    min_percent: float = Field(alias="percentual_minimo")
    max_percent: float = Field(alias="percentual_maximo")
    multiplier: float = Field(alias="multiplicador")
