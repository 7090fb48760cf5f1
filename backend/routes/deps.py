"""FastAPI dependencies exposing the per-app components to handlers."""

from fastapi import Request

from services.proxy import OpenDataProxy


def get_proxy(request: Request) -> OpenDataProxy:
    return request.app.state.proxy
