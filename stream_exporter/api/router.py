from fastapi import APIRouter

from .endpoints import health, metrics


def build_api_router(metrics_path: str) -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(metrics.build_router(metrics_path))
    return api_router
