import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from meatshop.core.config import settings
from meatshop.domain.errors import ShopError
from meatshop.infrastructure.database import init_db
from meatshop.application.container import Services, build_services
from meatshop.interfaces import (
    auth_api, bank_accounts_api, delivery_api, media_api, orders_api, products_api,
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def bootstrap_admin(services: Services) -> None:
    """Creates the first admin from ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD."""
    if not settings.ADMIN_PASSWORD:
        return
    user, created = services.users.ensure_admin(
        settings.ADMIN_USERNAME, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD
    )
    if created:
        logger.info("✅ Admin account '%s' created (id %s)", user.username, user.id)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.init_db:
        init_db()
    bootstrap_admin(app.state.services)
    yield


# ---------------------------------------------------------
# ERROR MAPPING: every error body is {"message": ...}
# ---------------------------------------------------------
async def shop_error_handler(request: Request, exc: ShopError):
    if exc.status_code >= 500:
        logger.error("❌ %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error("❌ Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    content = {"success": False, "message": str(exc) or "Internal Server Error"}
    if not settings.is_production:
        content["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=content)


def create_app(services: Optional[Services] = None, run_init_db: bool = True) -> FastAPI:
    app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

    # ---------------------------------------------------------
    # COMPOSITION ROOT
    # ---------------------------------------------------------
    app.state.services = services or build_services()
    app.state.init_db = run_init_db

    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.is_production,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Include Routers
    app.include_router(auth_api.router)
    app.include_router(products_api.router)
    app.include_router(orders_api.router)
    app.include_router(delivery_api.router)
    app.include_router(bank_accounts_api.router)
    app.include_router(media_api.router)

    @app.get("/")
    def health_check():
        return {"status": "active", "system": "Meat Shop API"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("meatshop.main:app", host="0.0.0.0", port=8000)
