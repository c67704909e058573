from fastapi import APIRouter

from linkcards.api.routes import links

api_router = APIRouter()
api_router.include_router(links.router, tags=['links'])
