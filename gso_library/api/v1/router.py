from fastapi import APIRouter
from gso_library.api.v1 import health, auth
from gso_library.core.config import settings

api_router = APIRouter(prefix=settings.API_PREFIX)

api_router.include_router(health.router, tags=['health'])
api_router.include_router(auth.router)
