from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail
import logging

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def send_low_stock_alert(self, ingredient_id):
    """
    Email the configured recipients that an ingredient reached its minimum.

    Queued by the inventory ledger after the transaction that crossed the
    threshold commits. The ingredient's low_stock_notified flag is already
    set by then, so a second crossing is not reported until stock recovers.

    Returns:
        dict: Status and details of the alert
    """
    from .models import Ingredient

    try:
        ingredient = Ingredient.all_objects.get(pk=ingredient_id)
    except Ingredient.DoesNotExist:
        logger.warning(f"Low stock alert skipped: ingredient {ingredient_id} no longer exists")
        return {"status": "skipped", "reason": "ingredient_missing", "ingredient_id": ingredient_id}

    recipients = getattr(settings, "POS_ENGINE", {}).get("LOW_STOCK_ALERT_RECIPIENTS", [])
    if not recipients:
        logger.info(f"No low stock alert recipients configured; '{ingredient.name}' at {ingredient.current_stock}")
        return {"status": "skipped", "reason": "no_recipients", "ingredient_id": ingredient_id}

    subject = f"Low stock: {ingredient.name}"
    message = (
        f"{ingredient.name} is at {ingredient.current_stock} {ingredient.unit} "
        f"(minimum {ingredient.minimum_stock} {ingredient.unit})."
    )

    try:
        send_mail(subject, message, settings.DEFAULT_FROM_EMAIL, recipients)
    except Exception as exc:
        logger.error(f"Failed to send low stock alert for ingredient {ingredient_id}: {exc}")
        raise self.retry(exc=exc)

    logger.info(f"Low stock alert sent for '{ingredient.name}' to {len(recipients)} recipient(s)")
    return {"status": "sent", "ingredient_id": ingredient_id, "recipients": len(recipients)}
