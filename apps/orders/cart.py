"""
Shopping cart kept in the client's signed session cookie.

Lines only store ids and quantities; prices and names are read from the
catalog whenever the cart is shown, so a price change is picked up on the
next request.
"""

import logging
import time
from decimal import Decimal

from django.conf import settings

from apps.catalog.models import Product, ProductVariation
from apps.orders.exceptions import CartError

logger = logging.getLogger(__name__)

HUNDRED = Decimal('100')
CENTS = Decimal('0.01')


def _now_ms():
    return int(time.time() * 1000)


def _normalize_variation_id(variation_id):
    if variation_id in (None, '', 0):
        return None
    return int(variation_id)


class Cart:
    """
    Cart stored under settings.CART_SESSION_KEY.

    Works on anything dict-like; with a Django session the session is marked
    modified on every write.
    """

    def __init__(self, session):
        self.session = session
        data = session.get(settings.CART_SESSION_KEY)
        if not isinstance(data, dict) or not isinstance(data.get('items'), list):
            data = {'items': [], 'last_updated': _now_ms()}
        self.data = data

    @property
    def items(self):
        return self.data['items']

    def save(self):
        self.data['last_updated'] = _now_ms()
        self.session[settings.CART_SESSION_KEY] = self.data
        if hasattr(self.session, 'modified'):
            self.session.modified = True

    def _find(self, product_id, variation_id):
        variation_id = _normalize_variation_id(variation_id)
        for index, item in enumerate(self.items):
            if item['product_id'] == product_id and _normalize_variation_id(item.get('variation_id')) == variation_id:
                return index
        return None

    def add(self, product_id, quantity, variation_id=None):
        """Add a line, or add to the quantity of the same (product, variation) line."""
        product_id = int(product_id)
        variation_id = _normalize_variation_id(variation_id)
        index = self._find(product_id, variation_id)
        if index is not None:
            self.items[index]['quantity'] += quantity
        else:
            self.items.append({
                'product_id': product_id,
                'variation_id': variation_id,
                'quantity': quantity,
                'added_at': _now_ms(),
            })
        self.save()

    def add_product(self, product_id, quantity, variation_id=None):
        """
        Validate and add a product to the cart.

        Raises:
            CartError with a message for the customer.
        """
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise CartError('Invalid quantity')

        product = None
        if str(product_id or '').isdigit():
            product = Product.objects.filter(pk=int(product_id)).first()
        if product is None:
            raise CartError('Invalid product')

        if quantity <= 0:
            raise CartError('Invalid quantity')

        if not product.is_active:
            raise CartError('This product is no longer available')

        variation_id = _normalize_variation_id(variation_id)
        if product.has_variations and variation_id is None:
            raise CartError('Please choose a variation')

        if not product.has_variations and variation_id is not None:
            raise CartError('This product has no variations')

        if variation_id is not None and not product.variations.filter(pk=variation_id).exists():
            raise CartError('Selected variation was not found')

        self.add(product.pk, quantity, variation_id)
        logger.debug("Added product %s (variation %s) x%d to cart", product.pk, variation_id, quantity)
        return product

    def remove(self, product_id, variation_id=None):
        index = self._find(int(product_id), variation_id)
        if index is not None:
            del self.items[index]
        self.save()

    def update_quantity(self, product_id, quantity, variation_id=None):
        """Zero or less removes the line; otherwise the quantity is at least 1."""
        quantity = int(quantity)
        if quantity <= 0:
            self.remove(product_id, variation_id)
            return
        index = self._find(int(product_id), variation_id)
        if index is not None:
            self.items[index]['quantity'] = max(1, quantity)
        self.save()

    def clear(self):
        self.data['items'] = []
        self.save()

    def enriched_items(self):
        """
        Cart lines joined with current catalog data.
        Lines whose product is gone or inactive are left out.
        """
        product_ids = {item['product_id'] for item in self.items}
        variation_ids = {item['variation_id'] for item in self.items if item.get('variation_id')}
        products = Product.objects.in_bulk(product_ids)
        variations = {
            variation.pk: variation
            for variation in ProductVariation.objects.filter(pk__in=variation_ids).prefetch_related(
                'attributes__attribute'
            )
        }

        enriched = []
        for item in self.items:
            product = products.get(item['product_id'])
            if product is None or not product.is_active:
                continue

            variation = variations.get(item.get('variation_id'))
            if item.get('variation_id') and (variation is None or variation.product_id != product.pk):
                continue

            if variation is not None:
                price = variation.price
                discount = variation.discount if variation.discount is not None else product.discount
                attributes = {va.attribute.name: va.value for va in variation.attributes.all()}
            else:
                price = product.price
                discount = product.discount
                attributes = {}

            enriched.append({
                'product_id': product.pk,
                'variation_id': variation.pk if variation else None,
                'quantity': item['quantity'],
                'added_at': item.get('added_at'),
                'product_name': product.name,
                'product_slug': product.slug,
                'sku': (variation.sku if variation and variation.sku else product.sku),
                'image': product.cover_image,
                'unit_of_measurement': product.unit_of_measurement,
                'price': price,
                'discount': discount,
                'attributes': attributes,
                'product': product,
                'variation': variation,
            })
        return enriched

    def item_count(self, enriched=None):
        enriched = enriched if enriched is not None else self.enriched_items()
        return sum(item['quantity'] for item in enriched)

    def totals(self, enriched=None):
        enriched = enriched if enriched is not None else self.enriched_items()
        return calculate_totals(enriched)


def calculate_totals(items):
    """
    subtotal = sum(price * quantity)
    discount_total = sum(price * quantity * discount / 100)
    total = subtotal - discount_total
    """
    subtotal = Decimal('0')
    discount_total = Decimal('0')
    for item in items:
        line = Decimal(str(item['price'])) * item['quantity']
        subtotal += line
        if item.get('discount'):
            discount_total += line * Decimal(str(item['discount'])) / HUNDRED

    subtotal = subtotal.quantize(CENTS)
    discount_total = discount_total.quantize(CENTS)
    return {
        'subtotal': subtotal,
        'discount_total': discount_total,
        'total': subtotal - discount_total,
    }
