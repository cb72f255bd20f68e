"""
Maintenance of product attribute blobs.

Product.product_attributes is a JSON object {attribute_key: "value1,value2"}
where attribute_key is the attribute id or, for older rows, its slug.
Standardized values are mirrored into ProductAttributeValue for filtering.
"""

import json
import logging

from django.db import transaction

from apps.catalog.models import (
    AttributeValue,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    VariationAttribute,
)
from apps.catalog.services.query_options import invalidate_for_model

logger = logging.getLogger(__name__)


def split_values(value):
    """'Oak, Ash' -> ['Oak', 'Ash']; non-string values become a single item."""
    if value is None:
        return []
    if not isinstance(value, str):
        return [str(value)]
    return [part.strip() for part in value.split(',') if part.strip()]


def parse_product_attributes(blob):
    """
    Normalize an attribute blob to a list of {'attribute_id', 'value'} pairs.

    Accepts the dict form {"12": "Oak"}, the list form
    [{"attributeId": "12", "value": "Oak"}] and JSON strings of either.
    Unparseable input yields an empty list.
    """
    if not blob:
        return []
    if isinstance(blob, str):
        try:
            blob = json.loads(blob)
        except ValueError:
            logger.warning("Unparseable attribute blob: %r", blob[:100])
            return []

    if isinstance(blob, dict):
        return [
            {'attribute_id': str(key), 'value': '' if value is None else str(value)}
            for key, value in blob.items()
        ]
    if isinstance(blob, list):
        pairs = []
        for item in blob:
            if not isinstance(item, dict):
                continue
            key = item.get('attribute_id', item.get('attributeId'))
            if key is None:
                continue
            value = item.get('value')
            pairs.append({'attribute_id': str(key), 'value': '' if value is None else str(value)})
        return pairs
    return []


def pairs_to_blob(pairs):
    """Inverse of parse_product_attributes, dropping empty values."""
    return {pair['attribute_id']: pair['value'] for pair in pairs if pair['value'].strip()}


def _attribute_lookup():
    attributes = list(ProductAttribute.objects.all())
    by_key = {str(attribute.id): attribute for attribute in attributes}
    by_key.update({attribute.slug: attribute for attribute in attributes if attribute.slug not in by_key})
    return by_key


def resolve_attribute(key, lookup=None):
    """Find the ProductAttribute an attribute key (id or slug) refers to."""
    lookup = lookup if lookup is not None else _attribute_lookup()
    return lookup.get(str(key))


def validate_attribute_values(pairs):
    """
    Check that standardized attribute values exist and are active.

    Free-text attributes and unknown attribute keys are not validated.
    Comma-separated values are checked one by one.

    Returns:
        List of {'attribute_id', 'value', 'error'}; empty when valid.
    """
    errors = []
    if not pairs:
        return errors

    lookup = _attribute_lookup()
    for pair in pairs:
        raw_value = pair.get('value') or ''
        if not raw_value.strip():
            continue

        attribute = lookup.get(str(pair.get('attribute_id')))
        if attribute is None or not attribute.is_standardized:
            continue

        allowed = set(
            AttributeValue.objects.filter(attribute=attribute, is_active=True)
            .values_list('value', flat=True)
        )
        for value in split_values(raw_value):
            if value not in allowed:
                errors.append({
                    'attribute_id': pair.get('attribute_id'),
                    'value': value,
                    'error': f'Value "{value}" is not one of the standardized values '
                             f'of attribute "{attribute.name}"',
                })
    return errors


def sync_product_attribute_values(product):
    """
    Rebuild the ProductAttributeValue rows of a product from its blob.
    Only standardized attributes with known active values produce rows.
    """
    lookup = _attribute_lookup()
    rows = []
    seen = set()

    for pair in parse_product_attributes(product.product_attributes):
        attribute = lookup.get(pair['attribute_id'])
        if attribute is None or not attribute.is_standardized:
            continue
        values = split_values(pair['value'])
        if not values:
            continue
        for attribute_value in AttributeValue.objects.filter(
            attribute=attribute, value__in=values, is_active=True
        ):
            key = (attribute.id, attribute_value.id)
            if key in seen:
                continue
            seen.add(key)
            rows.append(ProductAttributeValue(
                product=product, attribute=attribute, value=attribute_value
            ))

    with transaction.atomic():
        ProductAttributeValue.objects.filter(product=product).delete()
        ProductAttributeValue.objects.bulk_create(rows)

    logger.debug("Synced %d attribute values for product %s", len(rows), product.pk)
    return len(rows)


def _rewrite_products(attribute, transform):
    """
    Apply transform(values) -> new values to every product blob holding the
    attribute. Returns the ids of products that changed.
    """
    keys = {str(attribute.id), attribute.slug}
    updated_ids = []

    for product in Product.objects.only('id', 'product_attributes'):
        blob = product.product_attributes
        if not isinstance(blob, dict):
            continue

        changed = False
        new_blob = dict(blob)
        for key in keys:
            if key not in blob or not blob[key]:
                continue
            values = split_values(blob[key])
            new_values = transform(values)
            if new_values == values:
                continue
            changed = True
            if new_values:
                new_blob[key] = ','.join(new_values)
            else:
                del new_blob[key]

        if changed:
            Product.objects.filter(pk=product.pk).update(product_attributes=new_blob)
            product.product_attributes = new_blob
            sync_product_attribute_values(product)
            updated_ids.append(product.pk)

    # queryset updates send no post_save
    if updated_ids:
        invalidate_for_model('Product')
    return updated_ids


def cleanup_value_from_products(attribute, value):
    """
    Remove a deleted attribute value from every product and variation.

    Returns:
        {'updated_count': int, 'product_ids': [...], 'variation_count': int}
    """
    product_ids = _rewrite_products(
        attribute, lambda values: [v for v in values if v != value]
    )
    variation_count, _ = VariationAttribute.objects.filter(
        attribute=attribute, value=value
    ).delete()
    if variation_count:
        invalidate_for_model('VariationAttribute')

    logger.info(
        "Removed value %r of attribute %s from %d products",
        value, attribute.pk, len(product_ids)
    )
    return {
        'updated_count': len(product_ids),
        'product_ids': product_ids,
        'variation_count': variation_count,
    }


def rename_value_in_products(attribute, old_value, new_value):
    """
    Replace a renamed attribute value in every product and variation.

    Returns:
        {'updated_count': int, 'product_ids': [...], 'variation_count': int}
    """
    if old_value == new_value:
        return {'updated_count': 0, 'product_ids': [], 'variation_count': 0}

    product_ids = _rewrite_products(
        attribute, lambda values: [new_value if v == old_value else v for v in values]
    )
    variation_count = VariationAttribute.objects.filter(
        attribute=attribute, value=old_value
    ).update(value=new_value)
    if variation_count:
        invalidate_for_model('VariationAttribute')

    logger.info(
        "Renamed value %r -> %r of attribute %s in %d products",
        old_value, new_value, attribute.pk, len(product_ids)
    )
    return {
        'updated_count': len(product_ids),
        'product_ids': product_ids,
        'variation_count': variation_count,
    }


def has_unknown_attributes(blob, lookup):
    """True when the blob references an attribute key that no longer exists."""
    return any(pair['attribute_id'] not in lookup for pair in parse_product_attributes(blob))


def count_products_with_attribute_errors():
    """
    Products whose attribute blob references unknown attributes.

    Returns:
        {'count': int, 'product_ids': [...]}
    """
    lookup = _attribute_lookup()
    product_ids = [
        product.pk
        for product in Product.objects.only('id', 'product_attributes')
        if has_unknown_attributes(product.product_attributes, lookup)
    ]
    return {'count': len(product_ids), 'product_ids': product_ids}
