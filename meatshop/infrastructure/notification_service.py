import logging

from twilio.base.exceptions import TwilioException
from twilio.rest import Client

from meatshop.core.config import settings
from meatshop.domain.schemas import OrderOut
from meatshop.interfaces.INotifier import INotifier

logger = logging.getLogger(__name__)


def _whatsapp(number: str) -> str:
    # Twilio requires the "whatsapp:" prefix
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


def format_order_message(order: OrderOut) -> str:
    lines = [f"- {item.quantity}x #{item.product_id} ({item.product.name if item.product else 'deleted'})"
             for item in order.items]
    return (
        f"🔔 *NEW ORDER #{order.id}*\n\n"
        f"👤 {order.customer_name} ({order.customer_phone})\n"
        f"📍 {order.customer_address}\n"
        f"🛒 Items:\n" + "\n".join(lines) + "\n\n"
        f"💰 Total: {order.total_amount} ({order.payment_method})"
    )


class NotificationService(INotifier):
    def __init__(self):
        self.client = None
        self.enabled = False

        # Only initialize if credentials exist in .env
        if settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN:
            try:
                self.client = Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
                self.enabled = True
                logger.info("✅ NotificationService: Twilio Client Initialized")
            except TwilioException as e:
                logger.error("❌ Failed to initialize Twilio Client: %s", e)
        else:
            logger.info("⚠️ NotificationService: Credentials missing in .env. Notifications disabled.")

    def notify_admin_new_order(self, order: OrderOut) -> bool:
        """Sends a WhatsApp message to the admin. Never raises: the order is already committed."""
        if not self.enabled or not settings.ADMIN_PHONE_NUMBER or not settings.TWILIO_FROM_NUMBER:
            logger.debug("NotificationService disabled or admin number missing.")
            return False

        try:
            self.client.messages.create(
                from_=_whatsapp(settings.TWILIO_FROM_NUMBER),
                body=format_order_message(order),
                to=_whatsapp(settings.ADMIN_PHONE_NUMBER),
            )
            logger.info("✅ Admin notification sent for order %s", order.id)
            return True
        except Exception as e:
            logger.error("❌ Failed to send admin notification for order %s: %s", order.id, e)
            return False
