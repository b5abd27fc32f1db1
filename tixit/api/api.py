from fastapi import APIRouter
from tixit.api.routes.auth import router as auth_router
from tixit.api.routes.tickets import router as tickets_router

api_router = APIRouter(prefix="/api")
api_router.include_router(auth_router)
api_router.include_router(tickets_router)
