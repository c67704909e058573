from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from linkcards.api.deps import get_content_store, get_link_resolver
from linkcards.schemas.content import ContentDocument
from linkcards.schemas.link import LinkMetadata
from linkcards.services.content_store import ContentStore
from linkcards.services.link_resolver import LinkResolver

router = APIRouter()


def _load_document(store: ContentStore) -> ContentDocument:
    try:
        return store.load()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail='Content document not found') from exc
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail='Invalid content structure') from exc


@router.get('/content', response_model=ContentDocument)
def get_content(store: ContentStore = Depends(get_content_store)):
    return _load_document(store)


@router.get('/links', response_model=list[LinkMetadata])
async def list_links(
    store: ContentStore = Depends(get_content_store),
    resolver: LinkResolver = Depends(get_link_resolver),
):
    document = _load_document(store)
    return await resolver.resolve(document.links)
