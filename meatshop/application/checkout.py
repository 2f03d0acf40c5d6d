import logging
from typing import Optional, Tuple

from meatshop.domain.errors import EmptyOrderError, IdempotencyConflictError
from meatshop.domain.schemas import NewOrder, OrderOut
from meatshop.infrastructure.idempotency_store import STATUS_COMPLETED, IdempotencyStore
from meatshop.interfaces.INotifier import INotifier
from meatshop.interfaces.IOrderRepository import IOrderRepository

logger = logging.getLogger(__name__)


class CheckoutService:
    """Turns a normalized cart into a persisted order."""

    def __init__(self, order_repo: IOrderRepository, idempotency: IdempotencyStore, notifier: INotifier):
        self.order_repo = order_repo
        self.idempotency = idempotency
        self.notifier = notifier

    def place_order(self, new_order: NewOrder, idempotency_key: Optional[str] = None) -> Tuple[OrderOut, bool]:
        """
        Returns (order, created). `created` is False when an earlier submission
        with the same Idempotency-Key is replayed instead of writing a new order.
        """
        if not new_order.items:
            raise EmptyOrderError()

        if not idempotency_key:
            order = self.order_repo.create_order(new_order)
            self._notify(order)
            return order, True

        fingerprint = new_order.fingerprint()
        existing = self.idempotency.reserve(idempotency_key, fingerprint)
        if existing is not None:
            replay = self._replay(idempotency_key, fingerprint, existing)
            if replay is not None:
                return replay, False
            # Record pointed at an order that is gone; start over
            self.idempotency.release(idempotency_key)
            self.idempotency.reserve(idempotency_key, fingerprint)

        try:
            order = self.order_repo.create_order(new_order, idempotency_key=idempotency_key)
        except IdempotencyConflictError:
            # Key already persisted on an order (e.g. the key store was flushed)
            order = self.order_repo.find_by_idempotency_key(idempotency_key)
            if order is None:
                self.idempotency.release(idempotency_key)
                raise
            self.idempotency.complete(idempotency_key, fingerprint, order.id)
            return order, False
        except Exception:
            self.idempotency.release(idempotency_key)
            raise

        self.idempotency.complete(idempotency_key, fingerprint, order.id)
        self._notify(order)
        return order, True

    def _replay(self, key: str, fingerprint: str, record: dict) -> Optional[OrderOut]:
        if record.get("fingerprint") != fingerprint:
            raise IdempotencyConflictError("Idempotency-Key was already used for a different order")
        if record.get("status") != STATUS_COMPLETED:
            raise IdempotencyConflictError("An order with this Idempotency-Key is still being processed")

        logger.info("🔁 Replaying order %s for Idempotency-Key %s", record.get("order_id"), key)
        return self.order_repo.get_order_with_items(record["order_id"])

    def _notify(self, order: OrderOut) -> None:
        try:
            self.notifier.notify_admin_new_order(order)
        except Exception as e:
            logger.error("❌ Admin notification failed for order %s: %s", order.id, e)
