"""
Test data creators shared by the catalog and orders tests.
"""
from decimal import Decimal

from django.contrib.auth import get_user_model

from apps.catalog.models import (
    AttributeValue,
    Brand,
    Category,
    Collection,
    Country,
    Product,
    ProductAttribute,
    ProductVariation,
    StoreLocation,
    VariationAttribute,
)


class TestDataFactory:
    """Factory for creating test data"""

    @staticmethod
    def create_staff_user(username='staff', **kwargs):
        User = get_user_model()
        return User.objects.create_user(
            username=username,
            password='testpass123',
            is_staff=True,
            **kwargs
        )

    @staticmethod
    def create_user(username='customer', **kwargs):
        User = get_user_model()
        return User.objects.create_user(username=username, password='testpass123', **kwargs)

    @staticmethod
    def create_country(name='Италия', code='IT', **kwargs):
        return Country.objects.create(name=name, code=code, **kwargs)

    @staticmethod
    def create_store_location(address='ул. Русская, 78', **kwargs):
        return StoreLocation.objects.create(address=address, **kwargs)

    @staticmethod
    def create_category(name='Flooring', slug=None, parent=None, **kwargs):
        return Category.objects.create(name=name, slug=slug or '', parent=parent, **kwargs)

    @staticmethod
    def create_brand(name='Tarkett', slug=None, **kwargs):
        return Brand.objects.create(name=name, slug=slug or name.lower(), **kwargs)

    @staticmethod
    def create_collection(brand, name='Classic', slug=None, **kwargs):
        return Collection.objects.create(brand=brand, name=name, slug=slug or name.lower(), **kwargs)

    @staticmethod
    def create_attribute(name='Color', slug=None, value_type=ProductAttribute.VALUE_TYPE_FREE_TEXT, **kwargs):
        return ProductAttribute.objects.create(
            name=name,
            slug=slug or name.lower(),
            value_type=value_type,
            **kwargs
        )

    @staticmethod
    def create_attribute_value(attribute, value, **kwargs):
        return AttributeValue.objects.create(attribute=attribute, value=value, **kwargs)

    @staticmethod
    def create_product(name='Oak parquet', price=Decimal('100.00'), **kwargs):
        kwargs.setdefault('unit_of_measurement', 'm2')
        return Product.objects.create(name=name, price=price, **kwargs)

    @staticmethod
    def create_variation(product, price=Decimal('100.00'), attributes=None, **kwargs):
        """attributes: {ProductAttribute: value}"""
        variation = ProductVariation.objects.create(product=product, price=price, **kwargs)
        for attribute, value in (attributes or {}).items():
            VariationAttribute.objects.create(variation=variation, attribute=attribute, value=value)
        return variation
