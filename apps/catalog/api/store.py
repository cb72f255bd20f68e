"""
Public store endpoints: listing, product page, navigation data.

Read endpoints go through the query-options cache; saves in the dashboard
invalidate it through model signals.
"""

import logging

from django.db.models import Count, Prefetch, Q
from django.shortcuts import get_object_or_404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from apps.catalog.models import (
    Brand,
    Category,
    Collection,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    ProductVariation,
    StoreLocation,
)
from apps.catalog.services import VariationSelectionService
from apps.catalog.services.category_tree import (
    build_category_tree,
    category_and_descendant_slugs,
    category_nodes,
)
from apps.catalog.services.images import image_url
from apps.catalog.services.products import increment_view_count
from apps.catalog.services.query_options import client_query_options, get_or_fetch
from .filters import CollectionFilter, StoreProductFilter
from .pagination import StorePagination
from .serializers import (
    BrandSerializer,
    CategorySerializer,
    CollectionSerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    ProductVariationSerializer,
    StoreLocationSerializer,
)

logger = logging.getLogger(__name__)

SORT_ORDERINGS = {
    'relevant': ['-is_featured', '-view_count', '-created_at', 'id'],
    'name': ['name', 'id'],
    'price-asc': ['price', 'id'],
    'price-desc': ['-price', 'id'],
    'newest': ['-created_at', '-id'],
    'oldest': ['created_at', 'id'],
}

RECOMMENDED_LIMIT = 8
SUGGESTION_LIMIT = 8


def _query_params_key(query_params):
    return tuple(sorted((key, tuple(query_params.getlist(key))) for key in query_params))


def _store_products():
    return Product.objects.filter(is_active=True).select_related(
        'brand', 'category', 'collection'
    ).prefetch_related(
        Prefetch(
            'variations',
            queryset=ProductVariation.objects.prefetch_related('attributes__attribute')
        )
    )


class StoreProductViewSet(viewsets.ReadOnlyModelViewSet):
    """
    API endpoint for the store catalog.

    list: Active products with filters, sort and pagination
    retrieve: Product page by slug
    """
    permission_classes = [AllowAny]
    lookup_field = 'slug'
    filter_backends = [DjangoFilterBackend]
    filterset_class = StoreProductFilter
    pagination_class = StorePagination

    def get_queryset(self):
        return _store_products()

    def get_serializer_class(self):
        if self.action == 'retrieve':
            return ProductDetailSerializer
        return ProductListSerializer

    def sort_queryset(self, queryset):
        sort = self.request.query_params.get('sort') or 'relevant'
        return queryset.order_by(*SORT_ORDERINGS.get(sort, SORT_ORDERINGS['relevant']))

    def list(self, request, *args, **kwargs):
        def fetch():
            queryset = self.sort_queryset(self.filter_queryset(self.get_queryset()))
            page = self.paginate_queryset(queryset)
            serializer = self.get_serializer(page, many=True)
            return self.paginator.get_paginated_data(serializer.data)

        data = get_or_fetch('store_products', fetch, *_query_params_key(request.query_params))
        return Response(data)

    def retrieve(self, request, *args, **kwargs):
        slug = kwargs[self.lookup_field]

        def fetch():
            product = self.get_queryset().filter(slug=slug).first()
            if product is None:
                return None
            return dict(self.get_serializer(product).data)

        data = get_or_fetch('product', fetch, slug)
        if data is None:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(data)

    @action(detail=True, methods=['post'], url_path='view')
    def record_view(self, request, slug=None):
        """Count a product page view. Never fails the page."""
        product_id = Product.objects.filter(slug=slug).values_list('pk', flat=True).first()
        if product_id is None:
            return Response({'error': 'Product not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'success': increment_view_count(product_id)})

    @action(detail=True, methods=['get'])
    def variation(self, request, slug=None):
        """
        Resolve a selection to a variation.

        Query params: <attribute_slug>=<value> pairs, as in the product page URL.
        Without a selection the page default is used.
        """
        product = get_object_or_404(self.get_queryset(), slug=slug)
        variations = list(product.variations.all()) if product.has_variations else []
        attributes = list(ProductAttribute.objects.all())

        selection = VariationSelectionService.selection_from_query(
            request.query_params, attributes, variations
        )
        if not selection:
            selection = VariationSelectionService.initial_selection(variations, single_only=True)

        variation = VariationSelectionService.find_variation(variations, selection)
        used_ids = VariationSelectionService.attribute_ids(variations)
        return Response({
            'selection': selection,
            'query': VariationSelectionService.selection_to_query(selection, attributes),
            'variation': ProductVariationSerializer(variation).data if variation else None,
            'available_values': VariationSelectionService.get_all_available_values(variations, selection),
            'attributes': [
                {'id': str(a.id), 'name': a.name, 'slug': a.slug}
                for a in attributes if str(a.id) in used_ids
            ],
        })

    @action(detail=False, methods=['get'])
    def recommended(self, request):
        """
        Products to show next to a product or on the home page.

        ?product=<slug> recommends from the same category, otherwise
        featured and most viewed products are returned.
        """
        product_slug = request.query_params.get('product') or ''

        def fetch():
            queryset = self.get_queryset()
            product = Product.objects.filter(slug=product_slug).select_related('category').first()
            if product is not None and product.category_id:
                queryset = queryset.filter(category_id=product.category_id).exclude(pk=product.pk)
            else:
                queryset = queryset.filter(is_featured=True)
            queryset = queryset.order_by('-view_count', '-created_at')[:RECOMMENDED_LIMIT]
            return list(ProductListSerializer(queryset, many=True).data)

        return Response(get_or_fetch('recommended_products', fetch, product_slug))


class StoreCategoryViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = CategorySerializer
    lookup_field = 'slug'
    pagination_class = None

    def get_queryset(self):
        return Category.objects.filter(is_active=True).select_related('parent')

    def list(self, request, *args, **kwargs):
        return Response(get_or_fetch(
            'categories', lambda: list(self.get_serializer(self.get_queryset(), many=True).data)
        ))

    def retrieve(self, request, *args, **kwargs):
        category = self.get_object()
        data = dict(self.get_serializer(category).data)
        data['ancestors'] = [
            {'name': ancestor.name, 'slug': ancestor.slug} for ancestor in category.get_ancestors()
        ]
        data['children'] = [
            {'name': child.name, 'slug': child.slug, 'image_url': image_url(child.image)}
            for child in category.children.filter(is_active=True)
        ]
        return Response(data)

    @action(detail=False, methods=['get'])
    def tree(self, request):
        return Response(get_or_fetch(
            'categories',
            lambda: build_category_tree(category_nodes(Category.objects.filter(is_active=True))),
            'tree'
        ))


class StoreBrandViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = BrandSerializer
    lookup_field = 'slug'
    pagination_class = None

    def get_queryset(self):
        return Brand.objects.filter(is_active=True).select_related('country')

    def list(self, request, *args, **kwargs):
        return Response(get_or_fetch(
            'brands', lambda: list(self.get_serializer(self.get_queryset(), many=True).data)
        ))

    def retrieve(self, request, *args, **kwargs):
        brand = self.get_object()
        data = dict(self.get_serializer(brand).data)
        data['collections'] = CollectionSerializer(
            brand.collections.filter(is_active=True), many=True
        ).data
        return Response(data)


class StoreCollectionViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [AllowAny]
    serializer_class = CollectionSerializer
    lookup_field = 'slug'
    pagination_class = None
    filter_backends = [DjangoFilterBackend]
    filterset_class = CollectionFilter

    def get_queryset(self):
        return Collection.objects.filter(is_active=True, brand__is_active=True).select_related('brand')


@api_view(['GET'])
@permission_classes([AllowAny])
def store_attribute_values(request):
    """
    Standardized attribute values with the number of active products
    carrying them, grouped by attribute. ?category=<slug> narrows the
    counts to a category and its descendants.
    """
    category_slug = request.query_params.get('category') or ''

    def fetch():
        rows = ProductAttributeValue.objects.filter(
            product__is_active=True, value__is_active=True
        )
        if category_slug:
            rows = rows.filter(product__category__slug__in=category_and_descendant_slugs(category_slug))
        rows = rows.values(
            'attribute_id', 'attribute__name', 'attribute__slug',
            'value_id', 'value__value', 'value__sort_order',
        ).annotate(
            product_count=Count('product', distinct=True)
        ).order_by('attribute__name', 'value__sort_order', 'value__value')

        grouped = {}
        for row in rows:
            attribute = grouped.setdefault(row['attribute_id'], {
                'id': row['attribute_id'],
                'name': row['attribute__name'],
                'slug': row['attribute__slug'],
                'values': [],
            })
            attribute['values'].append({
                'id': row['value_id'],
                'value': row['value__value'],
                'product_count': row['product_count'],
            })
        return list(grouped.values())

    return Response(get_or_fetch('attribute_filter_values', fetch, category_slug))


@api_view(['GET'])
@permission_classes([AllowAny])
def search_suggestions(request):
    """Products, categories and brands whose name matches ?q= (2+ characters)."""
    query = (request.query_params.get('q') or '').strip()
    if len(query) < 2:
        return Response({'products': [], 'categories': [], 'brands': []})

    products = Product.objects.filter(is_active=True).filter(
        Q(name__icontains=query) | Q(sku__icontains=query)
    ).order_by('-view_count', 'name')[:SUGGESTION_LIMIT]
    categories = Category.objects.filter(is_active=True, name__icontains=query)[:5]
    brands = Brand.objects.filter(is_active=True, name__icontains=query)[:5]

    return Response({
        'products': [
            {
                'name': product.name,
                'slug': product.slug,
                'image_url': image_url(product.cover_image),
                'price': product.price,
            }
            for product in products
        ],
        'categories': [{'name': c.name, 'slug': c.slug} for c in categories],
        'brands': [{'name': b.name, 'slug': b.slug} for b in brands],
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def store_locations(request):
    def fetch():
        return list(StoreLocationSerializer(StoreLocation.objects.filter(is_active=True), many=True).data)

    return Response(get_or_fetch('store_locations', fetch, 'active'))


@api_view(['GET'])
@permission_classes([AllowAny])
def query_options(request):
    """Cache settings of every resource for the client data layer."""
    return Response(client_query_options())
