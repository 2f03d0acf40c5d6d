import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from meatshop.core.config import settings
from meatshop.domain.errors import (
    EmptyOrderError, IdempotencyConflictError, InsufficientStockError,
    InvalidStatusTransition, ProductNotFoundError, ShopError,
)
from meatshop.domain.models import Order, OrderItem, OrderStatus, Product, can_transition
from meatshop.domain.schemas import NewOrder, OrderItemIn, OrderOut
from meatshop.infrastructure.database import SessionLocal
from meatshop.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)

MISSING_PRODUCT_SKIP = "skip"
MISSING_PRODUCT_REJECT = "reject"


class SqlAlchemyOrderRepository(IOrderRepository):
    def __init__(
        self,
        session_factory=SessionLocal,
        missing_product_policy: str = settings.MISSING_PRODUCT_POLICY,
        restore_stock_on_cancel: bool = settings.RESTORE_STOCK_ON_CANCEL,
    ):
        if missing_product_policy not in (MISSING_PRODUCT_SKIP, MISSING_PRODUCT_REJECT):
            raise ValueError(f"Unknown missing product policy: {missing_product_policy}")
        self.session_factory = session_factory
        self.missing_product_policy = missing_product_policy
        self.restore_stock_on_cancel = restore_stock_on_cancel

    def create_order(self, new_order: NewOrder, idempotency_key: Optional[str] = None) -> OrderOut:
        """
        Writes the order, its items and the stock decrements in one transaction.
        Any failure rolls everything back, so a partial order is never left behind.
        """
        if not new_order.items:
            raise EmptyOrderError()

        session = self.session_factory()
        try:
            order = Order(
                user_id=new_order.user_id,
                customer_name=new_order.customer_name,
                customer_email=new_order.customer_email,
                customer_phone=new_order.customer_phone,
                customer_address=new_order.customer_address,
                payment_method=new_order.payment_method.value,
                total_amount=new_order.resolved_total(),
                status=OrderStatus.PENDING.value,  # whatever the caller asked for
                idempotency_key=idempotency_key,
            )
            session.add(order)
            session.flush()

            session.add_all([
                OrderItem(order_id=order.id, product_id=item.product_id, quantity=item.quantity, price=item.price)
                for item in new_order.items
            ])
            for item in new_order.items:
                self._decrement_stock(session, item, order.id)

            session.commit()
            logger.info("✅ Order %s created (%s items, total %s)", order.id, len(new_order.items), order.total_amount)
            return self._load(session, order.id)
        except IntegrityError as e:
            session.rollback()
            if idempotency_key:
                raise IdempotencyConflictError("An order with this idempotency key already exists") from e
            logger.error("❌ DB Error creating order: %s", e)
            raise
        except ShopError:
            session.rollback()
            raise
        except Exception as e:
            logger.error("❌ DB Error creating order: %s", e, exc_info=True)
            session.rollback()
            raise
        finally:
            session.close()

    def _decrement_stock(self, session: Session, item: OrderItemIn, order_id: int) -> None:
        # Conditional update: concurrent orders cannot overdraw stock
        result = session.execute(
            update(Product)
            .where(Product.id == item.product_id, Product.stock >= item.quantity)
            .values(stock=Product.stock - item.quantity)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return

        available = session.execute(
            select(Product.stock).where(Product.id == item.product_id)
        ).scalar_one_or_none()

        if available is None:
            if self.missing_product_policy == MISSING_PRODUCT_REJECT:
                raise ProductNotFoundError(item.product_id)
            logger.warning(
                "⚠️ Product %s no longer exists, skipping stock decrement for order %s",
                item.product_id, order_id,
            )
            return

        raise InsufficientStockError(item.product_id, item.quantity, available)

    def _load(self, session: Session, order_id: int) -> Optional[OrderOut]:
        order = session.execute(
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return OrderOut.model_validate(order) if order else None

    def get_order_with_items(self, order_id: int) -> Optional[OrderOut]:
        with self.session_factory() as session:
            return self._load(session, order_id)

    def find_by_idempotency_key(self, key: str) -> Optional[OrderOut]:
        with self.session_factory() as session:
            order_id = session.execute(
                select(Order.id).where(Order.idempotency_key == key)
            ).scalar_one_or_none()
            return self._load(session, order_id) if order_id is not None else None

    def list_orders(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> List[OrderOut]:
        """
        Retrieves orders with their items, newest first.
        Optional start/end bound created_at (inclusive).
        """
        query = select(Order).options(selectinload(Order.items).selectinload(OrderItem.product))
        if start:
            query = query.where(Order.created_at >= start)
        if end:
            query = query.where(Order.created_at <= end)
        query = query.order_by(desc(Order.created_at), desc(Order.id))

        with self.session_factory() as session:
            return [OrderOut.model_validate(o) for o in session.execute(query).scalars().all()]

    def list_user_orders(self, user_id: int) -> List[OrderOut]:
        query = (
            select(Order)
            .options(selectinload(Order.items).selectinload(OrderItem.product))
            .where(Order.user_id == user_id)
            .order_by(desc(Order.created_at), desc(Order.id))
        )
        with self.session_factory() as session:
            return [OrderOut.model_validate(o) for o in session.execute(query).scalars().all()]

    def update_status(self, order_id: int, status: str) -> Optional[OrderOut]:
        requested = OrderStatus(status)
        session = self.session_factory()
        try:
            order = session.execute(
                select(Order).options(selectinload(Order.items)).where(Order.id == order_id).with_for_update()
            ).scalar_one_or_none()
            if order is None:
                return None

            current = OrderStatus(order.status)
            if not can_transition(current, requested):
                raise InvalidStatusTransition(current.value, requested.value)
            if current == requested:
                return self._load(session, order_id)

            if requested == OrderStatus.CANCELLED and self.restore_stock_on_cancel:
                for item in order.items:
                    session.execute(
                        update(Product)
                        .where(Product.id == item.product_id)
                        .values(stock=Product.stock + item.quantity)
                        .execution_options(synchronize_session=False)
                    )
                logger.info("↩️ Restored stock for cancelled order %s", order_id)

            order.status = requested.value
            session.commit()
            logger.info("Order %s status: %s -> %s", order_id, current.value, requested.value)
            return self._load(session, order_id)
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def pending_count(self) -> int:
        with self.session_factory() as session:
            return session.execute(
                select(func.count(Order.id)).where(Order.status == OrderStatus.PENDING.value)
            ).scalar_one()
