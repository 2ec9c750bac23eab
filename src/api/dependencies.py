from __future__ import annotations

from functools import lru_cache

from src.core.config import get_settings
from src.repositories.appointments_repository import AppointmentsRepository
from src.repositories.commission_repository import CommissionRepository
from src.repositories.leads_repository import LeadsRepository
from src.repositories.sales_repository import SalesRepository
from src.repositories.team_repository import TeamRepository
from src.services.attainment_service import AttainmentService
from src.services.lead_webhook_service import LeadWebhookService
from src.services.member_commission_service import MemberCommissionService
from src.services.sale_assembly_service import SaleAssemblyService
from src.services.scheduling_service import SchedulingService
from src.services.supervisor_commission_service import SupervisorCommissionService


@lru_cache
def get_team_repository() -> TeamRepository:
    return TeamRepository()


@lru_cache
def get_commission_repository() -> CommissionRepository:
    return CommissionRepository()


@lru_cache
def get_appointments_repository() -> AppointmentsRepository:
    return AppointmentsRepository()


@lru_cache
def get_sales_repository() -> SalesRepository:
    return SalesRepository()


@lru_cache
def get_leads_repository() -> LeadsRepository:
    return LeadsRepository()


def get_attainment_service() -> AttainmentService:
    return AttainmentService(
        team_repository=get_team_repository(),
        commission_repository=get_commission_repository(),
        appointments_repository=get_appointments_repository(),
        sales_repository=get_sales_repository(),
    )


def get_supervisor_commission_service() -> SupervisorCommissionService:
    return SupervisorCommissionService(
        team_repository=get_team_repository(),
        attainment_service=get_attainment_service(),
        max_workers=get_settings().batch_max_workers,
    )


def get_member_commission_service() -> MemberCommissionService:
    return MemberCommissionService(
        team_repository=get_team_repository(),
        commission_repository=get_commission_repository(),
        attainment_service=get_attainment_service(),
    )


def get_sale_assembly_service() -> SaleAssemblyService:
    return SaleAssemblyService(
        sales_repository=get_sales_repository(),
        team_repository=get_team_repository(),
    )


def get_scheduling_service() -> SchedulingService:
    return SchedulingService(
        appointments_repository=get_appointments_repository(),
        team_repository=get_team_repository(),
        leads_repository=get_leads_repository(),
    )


def get_lead_webhook_service() -> LeadWebhookService:
    return LeadWebhookService(repository=get_leads_repository())
