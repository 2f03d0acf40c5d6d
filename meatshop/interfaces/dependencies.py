"""
Per-request dependencies.

The caller is resolved from the signed session cookie into a RequestContext
and handed to each handler explicitly; there is no shared "current user".
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request

from meatshop.application.container import Services
from meatshop.domain.errors import AuthenticationRequired, PermissionDenied
from meatshop.domain.schemas import UserOut

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


@dataclass(frozen=True)
class RequestContext:
    user: Optional[UserOut] = None

    @property
    def is_admin(self) -> bool:
        return bool(self.user and self.user.is_admin)

    def can_view_order(self, order_user_id: Optional[int]) -> bool:
        if self.user is None:
            return False
        return self.user.is_admin or order_user_id == self.user.id


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_request_context(request: Request, services: Services = Depends(get_services)) -> RequestContext:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return RequestContext()

    try:
        user = services.users.get_user(int(user_id))
    except (TypeError, ValueError):
        user = None

    if user is None:
        # Stale cookie (user deleted or tampered value)
        logger.info("Dropping session for unknown user id %r", user_id)
        request.session.pop(SESSION_USER_KEY, None)
        return RequestContext()
    return RequestContext(user=user)


def require_auth(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
    if ctx.user is None:
        raise AuthenticationRequired()
    return ctx


def require_admin(ctx: RequestContext = Depends(require_auth)) -> RequestContext:
    if not ctx.user.is_admin:
        raise PermissionDenied("Admin access required")
    return ctx
