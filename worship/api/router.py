from fastapi import APIRouter

from worship.api.v1 import churches, roles, subscription

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(roles.router)
api_router.include_router(subscription.router)
api_router.include_router(churches.router)
