import logging
import mimetypes
from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from meatshop.application.container import Services
from meatshop.domain.errors import ValidationError
from meatshop.domain.schemas import MediaItemOut, SuccessResponse
from meatshop.infrastructure.media_storage import build_key
from meatshop.interfaces.dependencies import RequestContext, get_services, require_admin

router = APIRouter(tags=["media"])
logger = logging.getLogger(__name__)

MAX_UPLOAD_MB = 10


@router.get("/api/media", response_model=List[MediaItemOut])
def list_media(services: Services = Depends(get_services), ctx: RequestContext = Depends(require_admin)):
    return services.media.list_items()


@router.post("/api/media", response_model=MediaItemOut, status_code=201)
async def upload_media(
    file: UploadFile = File(None),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    """Passes the file straight through to the object store and records it in the media library."""
    if file is None or not file.filename:
        raise ValidationError("No file uploaded")

    content = await file.read()
    if len(content) > MAX_UPLOAD_MB * 1024 * 1024:
        raise ValidationError(f"File must be ≤ {MAX_UPLOAD_MB} MB.")

    content_type = file.content_type or mimetypes.guess_type(file.filename)[0] or "application/octet-stream"
    key = build_key("media", file.filename)
    url = await run_in_threadpool(services.object_storage.put, key, content, content_type)

    item = await run_in_threadpool(
        services.media.create_item, file.filename, content_type, url, key, len(content)
    )
    logger.info("📁 Media %s uploaded by admin %s -> %s", item.id, ctx.user.id, url)
    return item


@router.delete("/api/media/{item_id}", response_model=SuccessResponse)
def delete_media(
    item_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    key = services.media.pop_item(item_id)
    if key is None:
        raise HTTPException(status_code=404, detail="Item not found")
    if not services.object_storage.delete(key):
        logger.warning("⚠️ Media %s had no stored object at %s", item_id, key)
    return SuccessResponse()


@router.get("/uploads/{key:path}")
def serve_upload(key: str, services: Services = Depends(get_services)):
    try:
        data = services.object_storage.get(key)
    except ValueError:
        data = None
    if data is None:
        raise HTTPException(status_code=404, detail="Not Found")

    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return Response(content=data, media_type=media_type, headers={"Cache-Control": "public, max-age=31536000"})
