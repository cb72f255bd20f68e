"""
Catalog models for the storefront.

Model Hierarchy:
- Country, StoreLocation: reference data shown on brands and products
- Brand, Collection: manufacturer and its product lines
- Category: hierarchical categories
- ProductAttribute / AttributeValue: runtime attribute definitions and allowed values
- Product: base product with JSON attribute blob and images
- ProductAttributeValue: normalized standardized values for filtering
- ProductVariation / VariationAttribute: priced SKUs made of attribute values
"""

from .location import Country, StoreLocation
from .brand import Brand, Collection
from .category import Category
from .attribute import ProductAttribute, AttributeValue, ProductAttributeValue
from .product import Product, ProductStoreLocation
from .variation import ProductVariation, VariationAttribute

__all__ = [
    'Country',
    'StoreLocation',
    'Brand',
    'Collection',
    'Category',
    'ProductAttribute',
    'AttributeValue',
    'ProductAttributeValue',
    'Product',
    'ProductStoreLocation',
    'ProductVariation',
    'VariationAttribute',
]
