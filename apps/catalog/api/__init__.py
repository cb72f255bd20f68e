from .serializers import (
    BrandSerializer,
    CategorySerializer,
    CollectionSerializer,
    CountrySerializer,
    ProductAttributeSerializer,
    AttributeValueSerializer,
    ProductListSerializer,
    ProductDetailSerializer,
    ProductWriteSerializer,
    ProductVariationSerializer,
    StoreLocationSerializer,
)

__all__ = [
    'BrandSerializer',
    'CategorySerializer',
    'CollectionSerializer',
    'CountrySerializer',
    'ProductAttributeSerializer',
    'AttributeValueSerializer',
    'ProductListSerializer',
    'ProductDetailSerializer',
    'ProductWriteSerializer',
    'ProductVariationSerializer',
    'StoreLocationSerializer',
]
