from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_sale_assembly_service
from src.schemas.sales import AssembledSale
from src.services.sale_assembly_service import SaleAssemblyService
from src.shared.response import Meta, ResponseEnvelope, build_pagination


router = APIRouter(prefix="/sales", tags=["sales"])


def _meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="form_entries",
        time_window="",
        calculation_version="v1",
    )


@router.get("")
def list_sales(
    vendedor_id: Optional[str] = Query(default=None),
    status: Optional[str] = Query(default=None),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=200),
    service: SaleAssemblyService = Depends(get_sale_assembly_service),
) -> ResponseEnvelope[List[AssembledSale]]:
    data, total = service.list_sales(
        vendor_id=vendedor_id,
        status=status,
        limit=page_size,
        offset=(page - 1) * page_size,
    )
    return ResponseEnvelope(
        data=data, pagination=build_pagination(page, page_size, total), meta=_meta()
    )


@router.get("/{sale_id}")
def get_sale(
    sale_id: str,
    service: SaleAssemblyService = Depends(get_sale_assembly_service),
) -> ResponseEnvelope[AssembledSale]:
    return ResponseEnvelope(data=service.get_sale(sale_id), meta=_meta())
