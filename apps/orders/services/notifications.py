"""Order confirmation emails. Failures never fail the order."""

import logging
from smtplib import SMTPException

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def _order_summary(order):
    lines = [f"Order #{order.pk}", '']
    for item in order.items.select_related('product'):
        attributes = ', '.join(f"{name}: {value}" for name, value in (item.attributes or {}).items())
        suffix = f" ({attributes})" if attributes else ''
        lines.append(f"- {item.product.name}{suffix} x{item.quantity}: {item.final_amount} {order.currency}")
    lines.extend([
        '',
        f"Subtotal: {order.subtotal_amount} {order.currency}",
        f"Discount: {order.discount_amount} {order.currency}",
        f"Shipping: {order.shipping_amount} {order.currency}",
        f"Total: {order.total_amount} {order.currency}",
    ])
    if order.notes:
        lines.extend(['', f"Notes: {order.notes}"])
    return '\n'.join(lines)


def _send(subject, body, recipient):
    send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [recipient], fail_silently=False)


def send_order_emails(order):
    """
    Send the customer confirmation and the store notification.

    Returns:
        List of warnings for the emails that could not be sent.
    """
    warnings = []
    summary = _order_summary(order)

    customer_email = order.customer_email
    if customer_email:
        try:
            _send(f"Your order #{order.pk}", summary, customer_email)
        except (SMTPException, OSError) as exc:
            logger.warning("Failed to send confirmation for order %s: %s", order.pk, exc)
            warnings.append('Confirmation email could not be sent')
    else:
        warnings.append('No customer email, confirmation not sent')

    if settings.STORE_EMAIL:
        try:
            _send(f"New order #{order.pk}", summary, settings.STORE_EMAIL)
        except (SMTPException, OSError) as exc:
            logger.warning("Failed to send store notification for order %s: %s", order.pk, exc)
            warnings.append('Store notification could not be sent')

    return warnings
