from django.db.models import Q
from django_filters import rest_framework as filters

from apps.catalog.models import AttributeValue, Collection, Product
from apps.catalog.services.attributes import count_products_with_attribute_errors
from apps.catalog.services.category_tree import category_and_descendant_slugs


def _split(value):
    return [part.strip() for part in (value or '').split(',') if part.strip()]


class StoreProductFilter(filters.FilterSet):
    """Filters of the store listing. All of them combine with AND."""

    search = filters.CharFilter(method='filter_search')

    # Category includes its descendants
    category = filters.CharFilter(method='filter_category')

    # Comma-separated slugs
    brand = filters.CharFilter(method='filter_brand')
    collection = filters.CharFilter(method='filter_collection')

    # Price filters
    min_price = filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = filters.NumberFilter(field_name='price', lookup_expr='lte')

    discounted = filters.BooleanFilter(method='filter_discounted')
    featured = filters.BooleanFilter(field_name='is_featured')

    # Attribute filters
    attr = filters.CharFilter(method='filter_by_attributes')

    class Meta:
        model = Product
        fields = []

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(sku__icontains=value)
            | Q(description__icontains=value)
            | Q(brand__name__icontains=value)
            | Q(variations__sku__icontains=value)
        ).distinct()

    def filter_category(self, queryset, name, value):
        slugs = category_and_descendant_slugs(value)
        return queryset.filter(category__slug__in=slugs)

    def filter_brand(self, queryset, name, value):
        return queryset.filter(brand__slug__in=_split(value))

    def filter_collection(self, queryset, name, value):
        return queryset.filter(collection__slug__in=_split(value))

    def filter_discounted(self, queryset, name, value):
        if value is True:
            return queryset.filter(Q(discount__gt=0) | Q(variations__discount__gt=0)).distinct()
        if value is False:
            return queryset.exclude(discount__gt=0).exclude(variations__discount__gt=0)
        return queryset

    def filter_by_attributes(self, queryset, name, value):
        """
        Filter by standardized attribute values: attr=<attribute_id>:<value_id>[,<value_id>]
        Repeat the parameter for more attributes.
        Example: ?attr=3:12,13&attr=5:40 (value 12 or 13 of attribute 3, and value 40 of attribute 5)
        """
        getlist = getattr(self.data, 'getlist', None)
        raw_filters = getlist(name) if getlist else [value]

        for raw in raw_filters:
            if ':' not in raw:
                continue
            attribute_id, value_ids = raw.split(':', 1)
            value_ids = [pk for pk in _split(value_ids) if pk.isdigit()]
            if not attribute_id.strip().isdigit() or not value_ids:
                continue
            values = AttributeValue.objects.filter(
                attribute_id=int(attribute_id), pk__in=value_ids
            )
            queryset = queryset.filter(
                attribute_values__attribute=int(attribute_id),
                attribute_values__value__in=values,
            )
        return queryset.distinct()


class DashboardProductFilter(filters.FilterSet):
    search = filters.CharFilter(method='filter_search')
    category = filters.CharFilter(method='filter_category')
    brand = filters.CharFilter(field_name='brand__slug')
    collection = filters.CharFilter(field_name='collection__slug')
    has_errors = filters.BooleanFilter(method='filter_has_errors')

    class Meta:
        model = Product
        fields = ['is_active', 'is_featured', 'has_variations']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value) | Q(sku__icontains=value) | Q(slug__icontains=value)
        )

    def filter_category(self, queryset, name, value):
        return queryset.filter(category__slug__in=category_and_descendant_slugs(value))

    def filter_has_errors(self, queryset, name, value):
        product_ids = count_products_with_attribute_errors()['product_ids']
        if value is True:
            return queryset.filter(pk__in=product_ids)
        if value is False:
            return queryset.exclude(pk__in=product_ids)
        return queryset


class CollectionFilter(filters.FilterSet):
    brand = filters.CharFilter(field_name='brand__slug')

    class Meta:
        model = Collection
        fields = ['brand', 'is_active']


class AttributeValueFilter(filters.FilterSet):
    attribute = filters.NumberFilter(field_name='attribute__id')
    attribute_slug = filters.CharFilter(field_name='attribute__slug')
    search = filters.CharFilter(field_name='value', lookup_expr='icontains')

    class Meta:
        model = AttributeValue
        fields = ['attribute', 'attribute_slug', 'is_active']
