from django.contrib import admin
from django.utils.html import format_html
from import_export import resources, fields
from import_export.admin import ImportExportModelAdmin
from import_export.widgets import ForeignKeyWidget
from adminsortable2.admin import SortableAdminMixin, SortableAdminBase, SortableInlineAdminMixin
from simple_history.admin import SimpleHistoryAdmin

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
from .services.images import image_url


def _image_preview(path, height=40):
    url = image_url(path)
    if url:
        return format_html('<img src="{}" style="max-height: {}px; max-width: 80px;" />', url, height)
    return '-'


# =============================================================================
# Import/Export Resources
# =============================================================================

class ProductResource(resources.ModelResource):
    """Resource for importing/exporting products."""

    category = fields.Field(
        column_name='category',
        attribute='category',
        widget=ForeignKeyWidget(Category, 'slug')
    )
    brand = fields.Field(
        column_name='brand',
        attribute='brand',
        widget=ForeignKeyWidget(Brand, 'slug')
    )
    collection = fields.Field(
        column_name='collection',
        attribute='collection',
        widget=ForeignKeyWidget(Collection, 'slug')
    )

    class Meta:
        model = Product
        import_id_fields = ['slug']
        fields = (
            'slug', 'name', 'sku', 'category', 'brand', 'collection', 'price',
            'discount', 'unit_of_measurement', 'square_meters_per_pack',
            'dimensions', 'is_active', 'is_featured', 'has_variations'
        )
        export_order = fields


class ProductVariationResource(resources.ModelResource):
    """Resource for importing/exporting variation prices."""

    product = fields.Field(
        column_name='product',
        attribute='product',
        widget=ForeignKeyWidget(Product, 'slug')
    )

    class Meta:
        model = ProductVariation
        fields = ('id', 'product', 'sku', 'price', 'discount', 'sort')
        export_order = fields


# =============================================================================
# Inlines
# =============================================================================

class AttributeValueInline(SortableInlineAdminMixin, admin.TabularInline):
    model = AttributeValue
    extra = 1
    fields = ['value', 'slug', 'is_active', 'sort_order']
    readonly_fields = ['slug']


class VariationAttributeInline(admin.TabularInline):
    model = VariationAttribute
    extra = 1
    autocomplete_fields = ['attribute']


class ProductVariationInline(admin.TabularInline):
    model = ProductVariation
    extra = 0
    fields = ['sku', 'price', 'discount', 'sort']
    show_change_link = True


class ProductStoreLocationInline(admin.TabularInline):
    model = ProductStoreLocation
    extra = 0


class CollectionInline(admin.TabularInline):
    model = Collection
    extra = 0
    fields = ['name', 'slug', 'is_active']
    prepopulated_fields = {'slug': ('name',)}


# =============================================================================
# Model Admins
# =============================================================================

@admin.register(Product)
class ProductAdmin(ImportExportModelAdmin, SimpleHistoryAdmin):
    resource_class = ProductResource
    list_display = [
        'name', 'slug', 'category', 'brand', 'price', 'discount',
        'variation_count', 'is_active', 'is_featured', 'cover_preview'
    ]
    list_filter = ['is_active', 'is_featured', 'has_variations', 'category', 'brand']
    list_editable = ['is_active', 'is_featured']
    search_fields = ['name', 'slug', 'sku', 'description']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['category', 'brand', 'collection']
    readonly_fields = ['view_count', 'variation_count', 'created_at', 'updated_at']
    inlines = [ProductVariationInline, ProductStoreLocationInline]
    list_per_page = 50

    fieldsets = (
        (None, {
            'fields': ('name', 'slug', 'sku', 'category', 'brand', 'collection', 'is_active', 'is_featured')
        }),
        ('Prices', {
            'fields': ('price', 'discount', 'unit_of_measurement', 'square_meters_per_pack')
        }),
        ('Content', {
            'fields': ('description', 'important_note', 'dimensions', 'tags', 'images')
        }),
        ('Attributes', {
            'fields': ('has_variations', 'product_attributes')
        }),
        ('Info', {
            'fields': ('view_count', 'variation_count', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['activate_products', 'deactivate_products']

    def cover_preview(self, obj):
        return _image_preview(obj.cover_image)
    cover_preview.short_description = 'Image'

    @admin.action(description='Activate selected products')
    def activate_products(self, request, queryset):
        # save() per product so the post_save signals run
        for product in queryset:
            product.is_active = True
            product.save(update_fields=['is_active', 'updated_at'])
        self.message_user(request, f'{queryset.count()} products activated.')

    @admin.action(description='Deactivate selected products')
    def deactivate_products(self, request, queryset):
        for product in queryset:
            product.is_active = False
            product.save(update_fields=['is_active', 'updated_at'])
        self.message_user(request, f'{queryset.count()} products deactivated.')


@admin.register(ProductVariation)
class ProductVariationAdmin(ImportExportModelAdmin, SimpleHistoryAdmin):
    resource_class = ProductVariationResource
    list_display = ['__str__', 'product', 'sku', 'price', 'discount', 'sort']
    list_filter = ['product__category', 'product__brand']
    list_editable = ['price', 'discount', 'sort']
    search_fields = ['sku', 'product__name']
    autocomplete_fields = ['product']
    inlines = [VariationAttributeInline]


@admin.register(ProductAttribute)
class ProductAttributeAdmin(SortableAdminBase, admin.ModelAdmin):
    list_display = ['name', 'slug', 'value_type', 'allow_multiple_values', 'value_count']
    list_filter = ['value_type']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [AttributeValueInline]

    def value_count(self, obj):
        return obj.values.count()
    value_count.short_description = 'Values'


@admin.register(Category)
class CategoryAdmin(SortableAdminMixin, admin.ModelAdmin):
    list_display = ['name', 'slug', 'parent', 'is_active', 'display_order', 'image_preview']
    list_filter = ['is_active', 'parent']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['parent']

    def image_preview(self, obj):
        return _image_preview(obj.image)
    image_preview.short_description = 'Image'


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'country', 'is_active', 'logo_preview']
    list_filter = ['is_active', 'country']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [CollectionInline]

    def logo_preview(self, obj):
        return _image_preview(obj.image)
    logo_preview.short_description = 'Logo'


@admin.register(Collection)
class CollectionAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'brand', 'is_active']
    list_filter = ['is_active', 'brand']
    search_fields = ['name', 'slug', 'brand__name']
    prepopulated_fields = {'slug': ('name',)}
    autocomplete_fields = ['brand']


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display = ['name', 'code', 'is_active', 'flag_preview']
    list_filter = ['is_active']
    search_fields = ['name', 'code']

    def flag_preview(self, obj):
        return _image_preview(obj.flag_image, height=20)
    flag_preview.short_description = 'Flag'


@admin.register(StoreLocation)
class StoreLocationAdmin(admin.ModelAdmin):
    list_display = ['address', 'is_active']
    list_filter = ['is_active']
    search_fields = ['address', 'description']


# =============================================================================
# Admin Site Configuration
# =============================================================================

admin.site.site_header = 'Storefront Admin'
admin.site.site_title = 'Storefront'
admin.site.index_title = 'Administration'
