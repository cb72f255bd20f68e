"""
Turns the session cart into an Order.

Amounts are taken from the cart totals at checkout time; order items keep
a copy of unit price, discount and variation attributes so later catalog
edits do not change past orders.
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from apps.orders.cart import CENTS, HUNDRED
from apps.orders.exceptions import CheckoutError
from apps.orders.models import Order, OrderItem

logger = logging.getLogger(__name__)


def shipping_amount_for(method):
    rates = settings.STORE_SHIPPING_RATES
    if method not in rates:
        raise CheckoutError(f'Unknown shipping method: {method}')
    return Decimal(str(rates[method])).quantize(CENTS)


def line_final_amount(price, discount, quantity):
    """unit price * (1 - discount / 100) * quantity"""
    price = Decimal(str(price))
    amount = price * quantity
    if discount:
        amount = price * (HUNDRED - Decimal(str(discount))) / HUNDRED * quantity
    return amount.quantize(CENTS)


def create_order(cart, customer_info, shipping_method='standard', notes='', payment_method=''):
    """
    Create an Order with its items from the cart and clear the cart.

    Raises:
        CheckoutError when the cart has no purchasable lines.
    """
    enriched = cart.enriched_items()
    if not enriched:
        raise CheckoutError('Your cart is empty')

    totals = cart.totals(enriched)
    shipping = shipping_amount_for(shipping_method)

    with transaction.atomic():
        order = Order.objects.create(
            subtotal_amount=totals['subtotal'],
            discount_amount=totals['discount_total'],
            shipping_amount=shipping,
            total_amount=totals['total'] + shipping,
            currency=settings.STORE_CURRENCY,
            payment_method=payment_method or '',
            shipping_method=shipping_method,
            customer_info=customer_info or {},
            notes=notes or '',
        )
        OrderItem.objects.bulk_create([
            OrderItem(
                order=order,
                product=item['product'],
                variation=item['variation'],
                quantity=item['quantity'],
                unit_amount=item['price'],
                discount_percentage=item['discount'],
                final_amount=line_final_amount(item['price'], item['discount'], item['quantity']),
                attributes=item['attributes'],
            )
            for item in enriched
        ])

    cart.clear()
    logger.info(
        "Created order %s: %d items, total %s %s",
        order.pk, len(enriched), order.total_amount, order.currency
    )
    return order
