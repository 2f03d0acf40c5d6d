import json
import logging
from typing import List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from meatshop.application.container import Services
from meatshop.domain.errors import ValidationError
from meatshop.domain.schemas import ProductCreate, ProductOut, ProductUpdate, SuccessResponse
from meatshop.infrastructure.media_storage import build_key
from meatshop.interfaces.dependencies import RequestContext, get_services, require_admin

router = APIRouter(prefix="/api/products", tags=["products"])
logger = logging.getLogger(__name__)


async def _read_product_body(request: Request) -> Tuple[dict, Optional[UploadFile]]:
    """
    Admin product forms arrive either as JSON or as multipart with an optional
    `image` file plus a `productData` JSON string (or loose form fields).
    Fields in productData win over loose fields. The image is returned unsaved.
    """
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            body = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON body")
        if not isinstance(body, dict):
            raise ValidationError("Product body must be an object")
        return body, None

    form = await request.form()
    data = {k: v for k, v in form.items() if isinstance(v, str) and v != "" and k != "productData"}

    raw = form.get("productData")
    if isinstance(raw, str) and raw:
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("productData is not valid JSON")
        if not isinstance(parsed, dict):
            raise ValidationError("productData must be an object")
        data.update({k: v for k, v in parsed.items() if v not in (None, "")})

    image = form.get("image")
    if isinstance(image, UploadFile) and image.filename:
        return data, image
    return data, None


def _validate(model, data: dict):
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        raise ValidationError(f"Invalid product: {problems}") from e


async def _save_with_image(services: Services, image: Optional[UploadFile], save, payload):
    """
    Stores the image only after the payload validated, then runs `save`.
    The stored object is removed again when the write fails or finds nothing.
    """
    if image is None:
        return await run_in_threadpool(save, payload)

    key = build_key("products", image.filename)
    content = await image.read()
    url = await run_in_threadpool(services.object_storage.put, key, content, image.content_type)
    try:
        product = await run_in_threadpool(save, payload.model_copy(update={"image_url": url}))
    except Exception:
        await run_in_threadpool(services.object_storage.delete, key)
        raise
    if product is None:
        await run_in_threadpool(services.object_storage.delete, key)
    return product


@router.get("", response_model=List[ProductOut])
def list_products(category: Optional[str] = None, services: Services = Depends(get_services)):
    return services.products.list_products(category=category)


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, services: Services = Depends(get_services)):
    product = services.products.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("", response_model=ProductOut, status_code=201)
async def create_product(
    request: Request,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    data, image = await _read_product_body(request)
    if not data.get("name") or not data.get("category"):
        raise ValidationError("Product name and category are required")

    payload = _validate(ProductCreate, data)
    product = await _save_with_image(services, image, services.products.create_product, payload)
    logger.info("Product %s created by admin %s", product.id, ctx.user.id)
    return product


@router.put("/{product_id}", response_model=ProductOut)
async def update_product(
    product_id: int,
    request: Request,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    data, image = await _read_product_body(request)
    payload = _validate(ProductUpdate, data)
    product = await _save_with_image(
        services, image, lambda changes: services.products.update_product(product_id, changes), payload
    )
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.delete("/{product_id}", response_model=SuccessResponse)
def delete_product(
    product_id: int,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(require_admin),
):
    if not services.products.delete_product(product_id):
        raise HTTPException(status_code=404, detail="Product not found")
    return SuccessResponse()
