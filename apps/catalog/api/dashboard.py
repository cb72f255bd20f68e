"""
Staff-only dashboard endpoints.

DashboardEntityViewSet is the generic CRUD shared by brands, categories,
collections, countries, store locations and attributes; subclasses only
declare the model specifics (image field, in-use check, cached resource).
"""

import logging

from django.db.models import Count, Prefetch
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response

from apps.catalog.exceptions import CatalogError, EntityInUseError
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
from apps.catalog.services import images as image_service
from apps.catalog.services.attributes import (
    cleanup_value_from_products,
    count_products_with_attribute_errors,
    rename_value_in_products,
)
from apps.catalog.services.products import delete_product
from apps.catalog.services.query_options import get_or_fetch
from apps.orders.models import Order
from .filters import AttributeValueFilter, CollectionFilter, DashboardProductFilter
from .pagination import StorePagination
from .serializers import (
    AttributeValueSerializer,
    BrandSerializer,
    CategorySerializer,
    CollectionSerializer,
    CountrySerializer,
    ImageDeleteSerializer,
    ImagePromoteSerializer,
    ImageUploadSerializer,
    ProductAttributeSerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    ProductWriteSerializer,
    StoreLocationSerializer,
)

logger = logging.getLogger(__name__)


def _error_response(exc):
    return Response(exc.as_response_data(), status=exc.status_code)


class DashboardEntityViewSet(viewsets.ModelViewSet):
    """
    Generic dashboard CRUD.

    image_field/image_folder: staging images in that field are moved to
    the folder on save; the stored image is removed on delete.
    cache_name: query-options resource the list is cached under.
    """
    permission_classes = [IsAdminUser]
    pagination_class = None
    image_field = None
    image_folder = None
    cache_name = None
    entity_label = 'Entity'

    def handle_exception(self, exc):
        if isinstance(exc, CatalogError):
            return _error_response(exc)
        return super().handle_exception(exc)

    def list(self, request, *args, **kwargs):
        if not self.cache_name:
            return super().list(request, *args, **kwargs)

        def fetch():
            queryset = self.filter_queryset(self.get_queryset())
            return list(self.get_serializer(queryset, many=True).data)

        params = tuple(sorted(request.query_params.items()))
        return Response(get_or_fetch(self.cache_name, fetch, 'dashboard', *params))

    def check_in_use(self, instance):
        """Raise EntityInUseError when the entity cannot be deleted."""

    def promote_image(self, serializer):
        """Move a staging image into place. Returns the new path, if any."""
        if not self.image_field:
            return None
        path = serializer.validated_data.get(self.image_field)
        if not image_service.is_staging_path(path):
            return None
        result = image_service.promote_staging_images(
            [path],
            final_folder=self.image_folder,
            slug=serializer.validated_data.get('slug'),
        )
        if path in result['path_map']:
            moved = result['path_map'][path]
            serializer.validated_data[self.image_field] = moved
            return moved
        self.warnings.append(f'Image {path} could not be moved out of staging')
        return None

    def save_with_image(self, serializer):
        moved = self.promote_image(serializer)
        try:
            serializer.save()
        except Exception:
            if moved:
                logger.warning("%s save failed, removing moved image %s", self.entity_label, moved)
                image_service.cleanup_images([moved])
            raise

    def perform_create(self, serializer):
        self.save_with_image(serializer)

    def perform_update(self, serializer):
        self.save_with_image(serializer)

    def create(self, request, *args, **kwargs):
        self.warnings = []
        response = super().create(request, *args, **kwargs)
        response.data['warnings'] = self.warnings
        return response

    def update(self, request, *args, **kwargs):
        self.warnings = []
        response = super().update(request, *args, **kwargs)
        response.data['warnings'] = self.warnings
        return response

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.check_in_use(instance)

        image_path = getattr(instance, self.image_field) if self.image_field else ''
        instance_id = instance.pk
        instance.delete()
        logger.info("Deleted %s %s", self.entity_label.lower(), instance_id)

        warnings = []
        if image_path and not image_service.is_staging_path(image_path):
            try:
                image_service.delete_image(image_path)
            except CatalogError as exc:
                logger.warning("Image %s of %s %s not deleted: %s", image_path, self.entity_label, instance_id, exc)
                warnings.append(f'Image {image_path} could not be deleted')

        return Response({'message': f'{self.entity_label} deleted', 'warnings': warnings})


class ProductCountsMixin:
    """GET .../counts/ -> {entity_id: number of products}"""
    count_field = None
    counts_cache_name = None

    @action(detail=False, methods=['get'])
    def counts(self, request):
        def fetch():
            rows = (
                Product.objects.filter(**{f'{self.count_field}__isnull': False})
                .values(self.count_field)
                .annotate(count=Count('id'))
                .order_by()
            )
            return {str(row[self.count_field]): row['count'] for row in rows}

        return Response(get_or_fetch(self.counts_cache_name, fetch))


class BrandViewSet(ProductCountsMixin, DashboardEntityViewSet):
    queryset = Brand.objects.select_related('country')
    serializer_class = BrandSerializer
    image_field = 'image'
    image_folder = 'brands'
    cache_name = 'brands'
    count_field = 'brand'
    counts_cache_name = 'brand_counts'
    entity_label = 'Brand'

    def check_in_use(self, instance):
        count = instance.products.count()
        if count:
            raise EntityInUseError(
                'Cannot delete brand: there are products using this brand',
                details={'product_count': count}
            )


class CategoryViewSet(ProductCountsMixin, DashboardEntityViewSet):
    queryset = Category.objects.select_related('parent')
    serializer_class = CategorySerializer
    image_field = 'image'
    image_folder = 'categories'
    cache_name = 'categories'
    count_field = 'category'
    counts_cache_name = 'category_counts'
    entity_label = 'Category'


class CollectionViewSet(ProductCountsMixin, DashboardEntityViewSet):
    queryset = Collection.objects.select_related('brand')
    serializer_class = CollectionSerializer
    filterset_class = CollectionFilter
    cache_name = 'collections'
    count_field = 'collection'
    counts_cache_name = 'collection_counts'
    entity_label = 'Collection'


class CountryViewSet(DashboardEntityViewSet):
    queryset = Country.objects.all()
    serializer_class = CountrySerializer
    image_field = 'flag_image'
    image_folder = 'country-flags'
    cache_name = 'countries'
    entity_label = 'Country'

    def check_in_use(self, instance):
        count = instance.brands.count()
        if count:
            raise EntityInUseError(
                'Cannot delete country: there are brands using this country',
                details={'brand_count': count}
            )


class StoreLocationViewSet(DashboardEntityViewSet):
    queryset = StoreLocation.objects.all()
    serializer_class = StoreLocationSerializer
    cache_name = 'store_locations'
    entity_label = 'Store location'


class ProductAttributeViewSet(DashboardEntityViewSet):
    queryset = ProductAttribute.objects.prefetch_related('values')
    serializer_class = ProductAttributeSerializer
    cache_name = 'product_attributes'
    entity_label = 'Attribute'

    def check_in_use(self, instance):
        if instance.variation_values.exists():
            raise EntityInUseError(
                'Cannot delete attribute that is being used in product variations'
            )

    @action(detail=False, methods=['get'])
    def counts(self, request):
        """Number of products whose variations use each attribute."""
        def fetch():
            rows = (
                VariationAttribute.objects.values('attribute')
                .annotate(count=Count('variation__product', distinct=True))
                .order_by()
            )
            return {str(row['attribute']): row['count'] for row in rows}

        return Response(get_or_fetch('product_attributes', fetch, 'counts'))


class AttributeValueViewSet(DashboardEntityViewSet):
    """
    Standardized values. Renaming or deleting a value rewrites the
    products and variations that use it.
    """
    queryset = AttributeValue.objects.select_related('attribute')
    serializer_class = AttributeValueSerializer
    filterset_class = AttributeValueFilter
    cache_name = 'attribute_values'
    entity_label = 'Attribute value'

    def update(self, request, *args, **kwargs):
        instance = self.get_object()
        old_value = instance.value
        response = super().update(request, *args, **kwargs)

        instance.refresh_from_db()
        if instance.value != old_value:
            result = rename_value_in_products(instance.attribute, old_value, instance.value)
            response.data['products_updated'] = result
        return response

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        attribute, value = instance.attribute, instance.value
        response = super().destroy(request, *args, **kwargs)
        response.data['products_updated'] = cleanup_value_from_products(attribute, value)
        return response


class ProductViewSet(DashboardEntityViewSet):
    """
    Dashboard products.

    create/update accept attributes, variations, store_location_ids and
    images in one payload; the response carries non-fatal warnings.
    """
    filterset_class = DashboardProductFilter
    pagination_class = StorePagination
    entity_label = 'Product'

    def get_queryset(self):
        return Product.objects.select_related(
            'brand', 'category', 'collection'
        ).prefetch_related(
            Prefetch(
                'variations',
                queryset=ProductVariation.objects.prefetch_related('attributes__attribute')
            )
        ).order_by('-created_at', '-id')

    def get_serializer_class(self):
        if self.action == 'list':
            return ProductListSerializer
        if self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductWriteSerializer

    def _saved_response(self, serializer, response_status):
        product = self.get_queryset().get(pk=serializer.instance.pk)
        data = dict(ProductDetailSerializer(product, context=self.get_serializer_context()).data)
        data['warnings'] = getattr(serializer, 'warnings', [])
        return Response(data, status=response_status)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self._saved_response(serializer, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        serializer = self.get_serializer(self.get_object(), data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return self._saved_response(serializer, status.HTTP_200_OK)

    def destroy(self, request, *args, **kwargs):
        warnings = delete_product(self.get_object())
        return Response({'message': 'Product deleted', 'warnings': warnings})

    @action(detail=False, methods=['get'], url_path='attribute-errors')
    def attribute_errors(self, request):
        """Products whose attributes reference attributes that no longer exist."""
        return Response(count_products_with_attribute_errors())


@api_view(['GET'])
@permission_classes([IsAdminUser])
def dashboard_totals(request):
    def fetch():
        return {
            'products': Product.objects.count(),
            'active_products': Product.objects.filter(is_active=True).count(),
            'brands': Brand.objects.count(),
            'collections': Collection.objects.count(),
            'categories': Category.objects.count(),
            'attributes': ProductAttribute.objects.count(),
            'store_locations': StoreLocation.objects.count(),
            'orders': Order.objects.count(),
            'pending_orders': Order.objects.filter(status=Order.STATUS_PENDING).count(),
        }

    return Response(get_or_fetch('totals', fetch))


@api_view(['POST'])
@permission_classes([IsAdminUser])
def upload_image(request):
    """
    Upload a base64 image. Product images usually go to staging/ first and
    are moved when the product is saved.
    """
    serializer = ImageUploadSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        result = image_service.upload_image(**serializer.validated_data)
    except CatalogError as exc:
        return _error_response(exc)
    return Response(result, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def delete_image(request):
    serializer = ImageDeleteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    try:
        result = image_service.delete_image(
            serializer.validated_data['filename'],
            serializer.validated_data.get('current_images'),
        )
    except CatalogError as exc:
        return _error_response(exc)
    return Response(result)


@api_view(['POST'])
@permission_classes([IsAdminUser])
def promote_images(request):
    serializer = ImagePromoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    result = image_service.promote_staging_images(**serializer.validated_data)
    return Response(result)
