"""API v1 router composition."""

from fastapi import APIRouter

from pos_terminal.api.v1.endpoints import auth, commands, lines, orders, tables

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(lines.router, prefix="/lines", tags=["lines"])
api_router.include_router(tables.router, prefix="/tables", tags=["tables"])
api_router.include_router(commands.router, prefix="/commands", tags=["commands"])
