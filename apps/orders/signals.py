"""
Django signals for the orders app.
Keeps cached order lists and dashboard totals fresh.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from apps.catalog.services.query_options import invalidate_for_model

from .models import Order, OrderItem


@receiver(post_save, sender=Order)
@receiver(post_delete, sender=Order)
@receiver(post_save, sender=OrderItem)
@receiver(post_delete, sender=OrderItem)
def invalidate_order_caches(sender, instance, **kwargs):
    invalidate_for_model(sender.__name__)
