"""Transparency portal revenue and expense routes, by fiscal year."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from routes.deps import get_proxy
from services.proxy import OpenDataProxy

router = APIRouter(prefix="/api/financeiro")


@router.get("/receitas")
async def revenues(
    ano: int | None = Query(None, ge=1900, le=2100),
    proxy: OpenDataProxy = Depends(get_proxy),
) -> Any:
    return await proxy.revenues(ano)


@router.get("/despesas")
async def expenses(
    ano: int | None = Query(None, ge=1900, le=2100),
    proxy: OpenDataProxy = Depends(get_proxy),
) -> Any:
    return await proxy.expenses(ano)
