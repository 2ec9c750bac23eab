from __future__ import annotations

from typing import Iterable, List, Optional

from src.core.supabase import SupabaseClient, in_filter
from src.models.team import GroupRecord, MemberRecord, MembershipRecord


MEMBER_COLUMNS = "id,name,email,user_type,nivel,ativo,horario_trabalho"


class TeamRepository:
    def __init__(self) -> None:
        self.client = SupabaseClient()

    def get_member(self, member_id: str) -> Optional[MemberRecord]:
        rows, _ = self.client.select(
            table="profiles",
            select=MEMBER_COLUMNS,
            filters=[("id", f"eq.{member_id}")],
            limit=1,
        )
        return MemberRecord.model_validate(rows[0]) if rows else None

    def get_supervisor(self, supervisor_id: str) -> Optional[MemberRecord]:
        rows, _ = self.client.select(
            table="profiles",
            select=MEMBER_COLUMNS,
            filters=[
                ("id", f"eq.{supervisor_id}"),
                ("user_type", "eq.supervisor"),
                ("ativo", "eq.true"),
            ],
            limit=1,
        )
        return MemberRecord.model_validate(rows[0]) if rows else None

    def list_members(self, member_ids: Iterable[str]) -> List[MemberRecord]:
        ids = [member_id for member_id in member_ids if member_id]
        if not ids:
            return []
        rows, _ = self.client.select(
            table="profiles",
            select=MEMBER_COLUMNS,
            filters=[("id", in_filter(ids))],
        )
        return [MemberRecord.model_validate(row) for row in rows]

    def list_active_members(self, roles: Iterable[str]) -> List[MemberRecord]:
        rows, _ = self.client.select(
            table="profiles",
            select=MEMBER_COLUMNS,
            filters=[("user_type", in_filter(list(roles))), ("ativo", "eq.true")],
            order="name.asc",
        )
        return [MemberRecord.model_validate(row) for row in rows]

    def get_group_for_supervisor(self, supervisor_id: str) -> Optional[GroupRecord]:
        rows, _ = self.client.select(
            table="grupos_supervisores",
            select="id,supervisor_id,nome_grupo",
            filters=[("supervisor_id", f"eq.{supervisor_id}")],
            limit=1,
        )
        return GroupRecord.model_validate(rows[0]) if rows else None

    def list_memberships(self, group_id: str) -> List[MembershipRecord]:
        rows, _ = self.client.select(
            table="membros_grupos_supervisores",
            select=(
                "grupo_id,usuario_id,created_at,left_at,"
                f"usuario:profiles!usuario_id({MEMBER_COLUMNS})"
            ),
            filters=[("grupo_id", f"eq.{group_id}")],
        )
        return [MembershipRecord.model_validate(row) for row in rows]
