"""
Django signals for the catalog app.
Handles the normalized attribute values of products and cache invalidation.
"""

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import (
    AttributeValue,
    Brand,
    Category,
    Collection,
    Country,
    Product,
    ProductAttribute,
    ProductStoreLocation,
    ProductVariation,
    StoreLocation,
    VariationAttribute,
)
from .services.attributes import sync_product_attribute_values
from .services.query_options import invalidate_for_model

CACHED_MODELS = [
    Product,
    ProductVariation,
    VariationAttribute,
    ProductStoreLocation,
    Brand,
    Collection,
    Category,
    Country,
    StoreLocation,
    ProductAttribute,
    AttributeValue,
]


@receiver(post_save, sender=Product)
def sync_attribute_values(sender, instance, raw=False, **kwargs):
    """
    Mirror standardized attribute values into ProductAttributeValue.
    Skipped while loading fixtures.
    """
    if raw:
        return
    sync_product_attribute_values(instance)


def invalidate_model_caches(sender, instance, **kwargs):
    invalidate_for_model(sender.__name__)


for model in CACHED_MODELS:
    post_save.connect(invalidate_model_caches, sender=model, dispatch_uid=f'invalidate_{model.__name__}_save')
    post_delete.connect(invalidate_model_caches, sender=model, dispatch_uid=f'invalidate_{model.__name__}_delete')
