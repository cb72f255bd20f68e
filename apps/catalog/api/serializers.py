from decimal import Decimal

from rest_framework import serializers

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
from apps.catalog.services.attributes import (
    parse_product_attributes,
    validate_attribute_values,
)
from apps.catalog.services.category_tree import category_nodes, would_create_circular_ref
from apps.catalog.services.images import image_url, parse_image_list
from apps.catalog.services.products import save_product
from apps.catalog.services.slugs import generate_slug
from apps.catalog.services.variation_selection import VariationSelectionService


class SlugFromNameMixin:
    """Fill an omitted slug from the name, like the dashboard forms do."""
    slug_source_field = 'name'

    def to_internal_value(self, data):
        if hasattr(data, 'copy'):
            data = data.copy()
        if not data.get('slug') and data.get(self.slug_source_field):
            data['slug'] = generate_slug(str(data[self.slug_source_field]))
        return super().to_internal_value(data)


# =============================================================================
# Reference data Serializers
# =============================================================================

class CountrySerializer(serializers.ModelSerializer):
    flag_image_url = serializers.SerializerMethodField()

    class Meta:
        model = Country
        fields = ['id', 'name', 'code', 'flag_image', 'flag_image_url', 'is_active']

    def get_flag_image_url(self, obj):
        return image_url(obj.flag_image)

    def validate_code(self, value):
        value = value.strip().upper()
        if len(value) != 2 or not value.isalpha():
            raise serializers.ValidationError('Country code must be two letters')
        return value


class StoreLocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreLocation
        fields = ['id', 'address', 'description', 'opening_hours', 'is_active']


class BrandSerializer(SlugFromNameMixin, serializers.ModelSerializer):
    image_url = serializers.SerializerMethodField()
    country_name = serializers.CharField(source='country.name', read_only=True, default=None)
    country_code = serializers.CharField(source='country.code', read_only=True, default=None)

    class Meta:
        model = Brand
        fields = [
            'id', 'name', 'slug', 'image', 'image_url',
            'country', 'country_name', 'country_code', 'is_active'
        ]

    def get_image_url(self, obj):
        return image_url(obj.image)


class CollectionSerializer(SlugFromNameMixin, serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    brand_slug = serializers.CharField(source='brand.slug', read_only=True)

    class Meta:
        model = Collection
        fields = ['id', 'name', 'slug', 'brand', 'brand_name', 'brand_slug', 'is_active']


class CategorySerializer(SlugFromNameMixin, serializers.ModelSerializer):
    parent_slug = serializers.SlugRelatedField(
        source='parent', slug_field='slug', queryset=Category.objects.all(),
        required=False, allow_null=True
    )
    full_path = serializers.CharField(read_only=True)
    image_url = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'parent_slug', 'full_path', 'image', 'image_url',
            'is_active', 'display_order'
        ]

    def get_image_url(self, obj):
        return image_url(obj.image)

    def validate(self, attrs):
        parent = attrs.get('parent')
        if self.instance and parent is not None:
            if would_create_circular_ref(self.instance.slug, parent.slug, category_nodes()):
                raise serializers.ValidationError(
                    {'parent_slug': 'A category cannot be moved under itself or its descendants'}
                )
        return attrs


# =============================================================================
# Attribute Serializers
# =============================================================================

class AttributeValueSerializer(serializers.ModelSerializer):
    attribute_name = serializers.CharField(source='attribute.name', read_only=True)

    class Meta:
        model = AttributeValue
        fields = [
            'id', 'attribute', 'attribute_name', 'value', 'slug',
            'sort_order', 'is_active', 'created_at'
        ]
        read_only_fields = ['created_at']

    def validate_value(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Value is required')
        if ',' in value:
            raise serializers.ValidationError('Value cannot contain a comma')
        return value


class ProductAttributeSerializer(SlugFromNameMixin, serializers.ModelSerializer):
    values = AttributeValueSerializer(many=True, read_only=True)

    class Meta:
        model = ProductAttribute
        fields = ['id', 'name', 'slug', 'value_type', 'allow_multiple_values', 'values']


# =============================================================================
# Variation Serializers
# =============================================================================

class VariationAttributeSerializer(serializers.ModelSerializer):
    attribute_id = serializers.SerializerMethodField()
    attribute_name = serializers.CharField(source='attribute.name', read_only=True)
    attribute_slug = serializers.CharField(source='attribute.slug', read_only=True)

    class Meta:
        model = VariationAttribute
        fields = ['attribute_id', 'attribute_name', 'attribute_slug', 'value']

    def get_attribute_id(self, obj):
        return str(obj.attribute_id)


class ProductVariationSerializer(serializers.ModelSerializer):
    attributes = VariationAttributeSerializer(many=True, read_only=True)
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = ProductVariation
        fields = ['id', 'sku', 'price', 'discount', 'discounted_price', 'sort', 'attributes']


class AttributePairSerializer(serializers.Serializer):
    attribute_id = serializers.CharField()
    value = serializers.CharField(allow_blank=True)

    def to_internal_value(self, data):
        if isinstance(data, dict) and 'attribute_id' not in data and 'attributeId' in data:
            data = {**data, 'attribute_id': data['attributeId']}
        return super().to_internal_value(data)


class VariationInputSerializer(serializers.Serializer):
    id = serializers.IntegerField(required=False, allow_null=True)
    sku = serializers.CharField(required=False, allow_blank=True, default='')
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    discount = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True,
        min_value=Decimal('0'), max_value=Decimal('100')
    )
    sort = serializers.IntegerField(required=False, default=0)
    attributes = AttributePairSerializer(many=True, required=False, default=list)

    def validate_attributes(self, value):
        ids = [pair['attribute_id'] for pair in value]
        duplicates = sorted({attr_id for attr_id in ids if ids.count(attr_id) > 1})
        if duplicates:
            raise serializers.ValidationError(
                f"Attribute used more than once: {', '.join(duplicates)}"
            )
        known = {str(pk) for pk in ProductAttribute.objects.values_list('id', flat=True)}
        unknown = [attr_id for attr_id in ids if attr_id not in known]
        if unknown:
            raise serializers.ValidationError(f"Unknown attributes: {', '.join(unknown)}")
        return value


# =============================================================================
# Product Serializers
# =============================================================================

def _resolved_attributes(product, attributes_by_id):
    result = []
    for pair in parse_product_attributes(product.product_attributes):
        attribute = attributes_by_id.get(pair['attribute_id'])
        result.append({
            'attribute_id': pair['attribute_id'],
            'name': attribute.name if attribute else pair['attribute_id'],
            'slug': attribute.slug if attribute else None,
            'value': pair['value'],
        })
    return result


class ProductListSerializer(serializers.ModelSerializer):
    """Product card for store listings and the dashboard grid."""
    brand_name = serializers.CharField(source='brand.name', read_only=True, default=None)
    brand_slug = serializers.CharField(source='brand.slug', read_only=True, default=None)
    category_slug = serializers.CharField(source='category.slug', read_only=True, default=None)
    collection_slug = serializers.CharField(source='collection.slug', read_only=True, default=None)
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    image_urls = serializers.SerializerMethodField()
    variations = serializers.SerializerMethodField()
    initial_selection = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'sku', 'price', 'discount', 'discounted_price',
            'unit_of_measurement', 'square_meters_per_pack',
            'images', 'image_urls', 'tags',
            'brand_name', 'brand_slug', 'category_slug', 'collection_slug',
            'is_active', 'is_featured', 'has_variations', 'view_count',
            'variations', 'initial_selection',
        ]

    def get_image_urls(self, obj):
        return [image_url(path) for path in obj.images or []]

    def _variations(self, obj):
        if not obj.has_variations:
            return []
        return VariationSelectionService.sort_for_display(obj.variations.all())

    def get_variations(self, obj):
        return ProductVariationSerializer(self._variations(obj), many=True).data

    def get_initial_selection(self, obj):
        return VariationSelectionService.initial_selection(list(obj.variations.all()) if obj.has_variations else [])


class ProductDetailSerializer(ProductListSerializer):
    """Full product page data."""
    brand = BrandSerializer(read_only=True)
    category = CategorySerializer(read_only=True)
    collection = CollectionSerializer(read_only=True)
    store_locations = serializers.SerializerMethodField()
    attributes = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            'description', 'important_note', 'dimensions',
            'brand', 'category', 'collection',
            'product_attributes', 'attributes', 'store_locations',
            'created_at', 'updated_at',
        ]

    def get_initial_selection(self, obj):
        # The product page only auto-selects a single variation
        variations = list(obj.variations.all()) if obj.has_variations else []
        return VariationSelectionService.initial_selection(variations, single_only=True)

    def get_store_locations(self, obj):
        return StoreLocationSerializer(
            obj.store_locations.filter(is_active=True), many=True
        ).data

    def get_attributes(self, obj):
        attributes_by_id = self.context.get('attributes_by_id')
        if attributes_by_id is None:
            attributes = list(ProductAttribute.objects.all())
            attributes_by_id = {str(a.id): a for a in attributes}
            attributes_by_id.update({a.slug: a for a in attributes})
        return _resolved_attributes(obj, attributes_by_id)


class ProductWriteSerializer(SlugFromNameMixin, serializers.ModelSerializer):
    """
    Dashboard create/update payload.

    attributes: [{attribute_id, value}], stored as the attribute blob.
    variations: full list; ids not sent are deleted.
    images: storage paths (list, JSON array or comma list), staging paths allowed.
    """
    category = serializers.SlugRelatedField(
        slug_field='slug', queryset=Category.objects.all(), required=False, allow_null=True
    )
    brand = serializers.SlugRelatedField(
        slug_field='slug', queryset=Brand.objects.all(), required=False, allow_null=True
    )
    collection = serializers.SlugRelatedField(
        slug_field='slug', queryset=Collection.objects.all(), required=False, allow_null=True
    )
    images = serializers.JSONField(required=False)
    attributes = AttributePairSerializer(many=True, required=False, write_only=True)
    variations = VariationInputSerializer(many=True, required=False, write_only=True)
    store_location_ids = serializers.ListField(
        child=serializers.IntegerField(), required=False, write_only=True
    )
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    discount = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, allow_null=True,
        min_value=Decimal('0'), max_value=Decimal('100')
    )
    tags = serializers.ListField(child=serializers.CharField(), required=False)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'slug', 'sku', 'description', 'important_note', 'tags',
            'price', 'discount', 'square_meters_per_pack', 'unit_of_measurement',
            'dimensions', 'category', 'brand', 'collection',
            'is_active', 'is_featured', 'has_variations',
            'images', 'attributes', 'variations', 'store_location_ids',
        ]
        extra_kwargs = {
            'slug': {
                'error_messages': {'unique': 'A product with this slug already exists'}
            },
        }

    def validate_images(self, value):
        return parse_image_list(value)

    def validate_store_location_ids(self, value):
        found = set(StoreLocation.objects.filter(pk__in=value).values_list('pk', flat=True))
        missing = [pk for pk in value if pk not in found]
        if missing:
            raise serializers.ValidationError(f"Unknown store locations: {missing}")
        return value

    def validate_attributes(self, value):
        errors = validate_attribute_values(value)
        if errors:
            raise serializers.ValidationError([error['error'] for error in errors])
        return value

    def validate_variations(self, value):
        ids = [item['id'] for item in value if item.get('id')]
        duplicate_ids = sorted({pk for pk in ids if ids.count(pk) > 1})
        if duplicate_ids:
            raise serializers.ValidationError(
                f"Duplicate variation IDs found: {', '.join(map(str, duplicate_ids))}"
            )

        skus = [item['sku'].strip() for item in value if item.get('sku', '').strip()]
        duplicate_skus = sorted({sku for sku in skus if skus.count(sku) > 1})
        if duplicate_skus:
            raise serializers.ValidationError(
                f"Duplicate variation SKUs found: {', '.join(duplicate_skus)}"
            )

        pairs = [pair for item in value for pair in item.get('attributes', [])]
        errors = validate_attribute_values(pairs)
        if errors:
            raise serializers.ValidationError([error['error'] for error in errors])
        return value

    def validate(self, attrs):
        collection = attrs.get('collection')
        brand = attrs.get('brand', self.instance.brand if self.instance else None)
        if collection is not None and brand is not None and collection.brand_id != brand.id:
            raise serializers.ValidationError(
                {'collection': 'Collection belongs to another brand'}
            )
        return attrs

    def create(self, validated_data):
        product, self.warnings = save_product(validated_data)
        return product

    def update(self, instance, validated_data):
        product, self.warnings = save_product(validated_data, instance=instance)
        return product


# =============================================================================
# Image Serializers
# =============================================================================

class ImageUploadSerializer(serializers.Serializer):
    file_data = serializers.CharField()
    file_name = serializers.CharField()
    file_type = serializers.CharField()
    file_size = serializers.IntegerField(required=False, min_value=0)
    folder = serializers.CharField(required=False, default='products')
    slug = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category_slug = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    product_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)

    def to_internal_value(self, data):
        # Accept the camelCase keys the dashboard uploader sends
        aliases = {
            'fileData': 'file_data', 'fileName': 'file_name', 'fileType': 'file_type',
            'fileSize': 'file_size', 'categorySlug': 'category_slug', 'productName': 'product_name',
        }
        if isinstance(data, dict) or hasattr(data, 'items'):
            data = {aliases.get(key, key): value for key, value in data.items()}
        return super().to_internal_value(data)


class ImageDeleteSerializer(serializers.Serializer):
    filename = serializers.CharField()
    current_images = serializers.JSONField(required=False, allow_null=True)


class ImagePromoteSerializer(serializers.Serializer):
    paths = serializers.ListField(child=serializers.CharField())
    final_folder = serializers.CharField(default='products')
    slug = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category_slug = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    product_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
