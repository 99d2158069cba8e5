from fastapi import APIRouter

from app.api.v1 import funding, health, policy

v1_router = APIRouter(prefix="/api/v1")

v1_router.include_router(funding.router, tags=["funding"])
v1_router.include_router(policy.router, tags=["policy"])
v1_router.include_router(health.router, prefix="/health", tags=["health"])
