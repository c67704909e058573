from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from linkcards.api.deps import get_link_resolver
from linkcards.api.router import api_router
from linkcards.core.config import settings
from linkcards.core.logging import configure_logging
from linkcards.db.init_db import init_db

configure_logging()

app = FastAPI(title=settings.app_name, version='0.1.0')

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['GET'],
    allow_headers=['*'],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)


@app.on_event('startup')
def startup() -> None:
    Path(settings.storage_path).mkdir(parents=True, exist_ok=True)
    if settings.cache_backend == 'sql':
        init_db()


@app.on_event('shutdown')
async def shutdown() -> None:
    if get_link_resolver.cache_info().currsize:
        await get_link_resolver().aclose()


@app.get('/health')
def health() -> dict:
    return {'status': 'ok'}
