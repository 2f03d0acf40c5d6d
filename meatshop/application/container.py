from dataclasses import dataclass
from typing import Optional

from meatshop.application.checkout import CheckoutService
from meatshop.application.delivery_service import DeliveryService
from meatshop.infrastructure.database import SessionLocal
from meatshop.infrastructure.idempotency_store import IdempotencyStore
from meatshop.infrastructure.media_storage import LocalObjectStorage
from meatshop.infrastructure.notification_service import NotificationService
from meatshop.infrastructure.repositories.bank_account_repository import SqlAlchemyBankAccountRepository
from meatshop.infrastructure.repositories.delivery_repository import SqlAlchemyDeliveryRepository
from meatshop.infrastructure.repositories.media_repository import SqlAlchemyMediaRepository
from meatshop.infrastructure.repositories.order_repository import SqlAlchemyOrderRepository
from meatshop.infrastructure.repositories.product_repository import SqlAlchemyProductRepository
from meatshop.infrastructure.repositories.user_repository import SqlAlchemyUserRepository
from meatshop.interfaces.IBankAccountRepository import IBankAccountRepository
from meatshop.interfaces.IMediaStorage import IMediaRepository, IObjectStorage
from meatshop.interfaces.INotifier import INotifier
from meatshop.interfaces.IOrderRepository import IOrderRepository
from meatshop.interfaces.IProductRepository import IProductRepository
from meatshop.interfaces.IUserRepository import IUserRepository


@dataclass
class Services:
    products: IProductRepository
    orders: IOrderRepository
    bank_accounts: IBankAccountRepository
    users: IUserRepository
    media: IMediaRepository
    object_storage: IObjectStorage
    checkout: CheckoutService
    delivery: DeliveryService


def build_services(
    session_factory=SessionLocal,
    order_repo: Optional[IOrderRepository] = None,
    idempotency: Optional[IdempotencyStore] = None,
    notifier: Optional[INotifier] = None,
    object_storage: Optional[IObjectStorage] = None,
    delivery: Optional[DeliveryService] = None,
) -> Services:
    """Composition root. Anything not passed in gets its production implementation."""
    order_repo = order_repo or SqlAlchemyOrderRepository(session_factory)
    checkout = CheckoutService(
        order_repo=order_repo,
        idempotency=idempotency or IdempotencyStore(),
        notifier=notifier or NotificationService(),
    )
    return Services(
        products=SqlAlchemyProductRepository(session_factory),
        orders=order_repo,
        bank_accounts=SqlAlchemyBankAccountRepository(session_factory),
        users=SqlAlchemyUserRepository(session_factory),
        media=SqlAlchemyMediaRepository(session_factory),
        object_storage=object_storage or LocalObjectStorage(),
        checkout=checkout,
        delivery=delivery or DeliveryService(SqlAlchemyDeliveryRepository(session_factory)),
    )
