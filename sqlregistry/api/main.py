from fastapi import APIRouter

from sqlregistry.api.routes import queries, utils

api_router = APIRouter()
api_router.include_router(queries.router)
api_router.include_router(utils.router)
