import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from meatshop.application.container import Services
from meatshop.domain.errors import AuthenticationRequired
from meatshop.domain.schemas import LoginRequest, OrderOut, RegisterRequest, SuccessResponse, UserOut
from meatshop.interfaces.dependencies import SESSION_USER_KEY, RequestContext, get_services, require_auth

router = APIRouter(prefix="/api", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=UserOut)
def login(payload: LoginRequest, request: Request, services: Services = Depends(get_services)):
    user = services.users.authenticate(payload.username, payload.password)
    if user is None:
        logger.info("[Login] Failed attempt for %s", payload.username)
        raise AuthenticationRequired("Invalid username or password")

    request.session[SESSION_USER_KEY] = user.id
    logger.info("[Login] User %s signed in", user.id)
    return user


@router.post("/register", response_model=UserOut, status_code=201)
def register(payload: RegisterRequest, request: Request, services: Services = Depends(get_services)):
    """Creates a customer account and signs it in."""
    user = services.users.create_user(payload)
    request.session[SESSION_USER_KEY] = user.id
    return user


@router.post("/logout", response_model=SuccessResponse)
def logout(request: Request):
    request.session.clear()
    return SuccessResponse(message="Logged out")


@router.get("/user", response_model=UserOut)
def current_user(ctx: RequestContext = Depends(require_auth)):
    return ctx.user


@router.get("/user/orders", response_model=List[OrderOut])
def my_orders(services: Services = Depends(get_services), ctx: RequestContext = Depends(require_auth)):
    return services.orders.list_user_orders(ctx.user.id)
