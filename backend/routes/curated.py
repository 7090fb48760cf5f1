"""Fixed datastore resources exposed under stable, topic-based paths."""

from typing import Any

from fastapi import APIRouter, Depends

from routes.deps import get_proxy
from services.proxy import OpenDataProxy

router = APIRouter(prefix="/api")


@router.get("/saude/medicamentos")
async def medications(proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    """Medication stock in municipal health units."""
    return await proxy.curated("saude_medicamentos")


@router.get("/mobilidade/acidentes")
async def accidents(proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    """Traffic accidents recorded by CTTU."""
    return await proxy.curated("cttu_acidentes")


@router.get("/empresas/cadastro")
async def company_registry(proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    return await proxy.curated("empresas_cadastro")


@router.get("/156/demandas")
async def citizen_requests(proxy: OpenDataProxy = Depends(get_proxy)) -> Any:
    """Requests filed through the 156 citizen service line."""
    return await proxy.curated("156_demandas")
