"""
Product persistence used by the dashboard API.

Saving a product touches several tables: the product row, its variations
and their attributes, store location links and, through the post_save
signal, the normalized attribute values. Staging images are moved to the
product directory first; if the database work then fails the moved files
are removed again.
"""

import logging

from django.db import DatabaseError, transaction
from django.db.models import F

from apps.catalog.exceptions import ImageStorageError
from apps.catalog.models import (
    Product,
    ProductStoreLocation,
    ProductVariation,
    VariationAttribute,
)
from apps.catalog.services import images as image_service
from apps.catalog.services.attributes import pairs_to_blob

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = [
    'name', 'slug', 'sku', 'description', 'important_note', 'tags', 'price',
    'discount', 'square_meters_per_pack', 'unit_of_measurement', 'dimensions',
    'category', 'brand', 'collection', 'is_active', 'is_featured', 'has_variations',
]


def _promote_images(images, product_data, instance):
    category = product_data.get('category') or (instance.category if instance else None)
    result = image_service.promote_staging_images(
        images,
        final_folder='products',
        slug=product_data.get('slug'),
        category_slug=category.slug if category else None,
        product_name=product_data.get('name'),
    )
    warnings = [
        f'Image {path} could not be moved out of staging' for path in result['failed']
    ]
    return image_service.apply_path_map(images, result['path_map']), list(result['path_map'].values()), warnings


def sync_variations(product, variations):
    """
    Update, insert and delete variations so the product matches the payload.

    Payload items: {'id'?, 'sku', 'price', 'discount', 'sort', 'attributes': [{attribute_id, value}]}.
    Items whose id does not belong to the product are inserted as new.
    """
    existing = {variation.id: variation for variation in product.variations.all()}
    keep_ids = set()
    new_attributes = []

    for item in variations if product.has_variations else []:
        variation = existing.get(item.get('id'))
        if variation is None:
            variation = ProductVariation(product=product)
        variation.sku = (item.get('sku') or '').strip()
        variation.price = item['price']
        variation.discount = item.get('discount')
        variation.sort = item.get('sort') or 0
        variation.save()
        keep_ids.add(variation.id)

        VariationAttribute.objects.filter(variation=variation).delete()
        for pair in item.get('attributes') or []:
            if not str(pair.get('value') or '').strip():
                continue
            new_attributes.append(VariationAttribute(
                variation=variation,
                attribute_id=int(pair['attribute_id']),
                value=str(pair['value']).strip(),
            ))

    VariationAttribute.objects.bulk_create(new_attributes)

    stale_ids = [pk for pk in existing if pk not in keep_ids]
    if stale_ids:
        ProductVariation.objects.filter(pk__in=stale_ids).delete()

    logger.debug(
        "Product %s variations: %d kept/added, %d deleted",
        product.pk, len(keep_ids), len(stale_ids)
    )
    return len(keep_ids), len(stale_ids)


def sync_store_locations(product, store_location_ids):
    ProductStoreLocation.objects.filter(product=product).delete()
    ProductStoreLocation.objects.bulk_create([
        ProductStoreLocation(product=product, store_location_id=location_id)
        for location_id in dict.fromkeys(store_location_ids or [])
    ])


def save_product(data, instance=None):
    """
    Create or update a product from validated data.

    Returns:
        (product, warnings)
    """
    data = dict(data)
    attributes = data.pop('attributes', None)
    variations = data.pop('variations', None)
    store_location_ids = data.pop('store_location_ids', None)
    images = data.pop('images', None)

    warnings = []
    moved = []
    if images is not None:
        images, moved, warnings = _promote_images(images, data, instance)

    try:
        with transaction.atomic():
            product = instance or Product()
            for field in PRODUCT_FIELDS:
                if field in data:
                    setattr(product, field, data[field])
            if images is not None:
                product.images = images
            if attributes is not None:
                product.product_attributes = pairs_to_blob(attributes)
            product.save()

            if variations is not None or not product.has_variations:
                sync_variations(product, variations or [])
            if store_location_ids is not None:
                sync_store_locations(product, store_location_ids)
    except Exception:
        if moved:
            logger.warning("Product save failed, removing %d moved images", len(moved))
            image_service.cleanup_images(moved)
        raise

    logger.info("Saved product %s (%s)", product.pk, product.slug)
    return product, warnings


def delete_product(product):
    """
    Delete a product and, best effort, its images.

    Returns:
        warnings
    """
    paths = list(product.images or [])
    product_id = product.pk
    product.delete()

    warnings = []
    for path in paths:
        if image_service.is_staging_path(path):
            continue
        try:
            image_service.delete_image(path)
        except ImageStorageError:
            warnings.append(f'Image {path} could not be deleted')
    logger.info("Deleted product %s", product_id)
    return warnings


def increment_view_count(product_id):
    """
    Add one view to an active product.
    Never raises; returns True when a row was updated.
    """
    try:
        updated = Product.objects.filter(pk=product_id, is_active=True).update(
            view_count=F('view_count') + 1
        )
    except DatabaseError as exc:
        logger.warning("Failed to increment view count of product %s: %s", product_id, exc)
        return False
    return bool(updated)
