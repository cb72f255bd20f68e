from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from simple_history.models import HistoricalRecords


class Product(models.Model):
    """
    Base product model.
    Example: "Oak parquet Classic" which may have multiple variations.

    Images are storage paths kept in a JSON list; the first one is the cover.
    product_attributes holds the raw attribute blob {attribute_id: "v1,v2"},
    standardized values are mirrored into ProductAttributeValue for filtering.
    """
    category = models.ForeignKey(
        'catalog.Category',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name='Category'
    )
    brand = models.ForeignKey(
        'catalog.Brand',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name='Brand'
    )
    collection = models.ForeignKey(
        'catalog.Collection',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
        verbose_name='Collection'
    )
    name = models.CharField(
        max_length=255,
        verbose_name='Name'
    )
    slug = models.SlugField(
        max_length=255,
        unique=True,
        verbose_name='Slug'
    )
    sku = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='SKU'
    )
    images = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Images',
        help_text='Storage paths, first one is the cover'
    )
    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )
    important_note = models.TextField(
        blank=True,
        verbose_name='Important note'
    )
    tags = models.JSONField(
        default=list,
        blank=True,
        verbose_name='Tags'
    )

    # Pricing
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        verbose_name='Price'
    )
    discount = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[
            MinValueValidator(Decimal('0')),
            MaxValueValidator(Decimal('100')),
        ],
        verbose_name='Discount (%)'
    )
    square_meters_per_pack = models.DecimalField(
        max_digits=8,
        decimal_places=3,
        null=True,
        blank=True,
        verbose_name='Square meters per pack'
    )
    unit_of_measurement = models.CharField(
        max_length=50,
        verbose_name='Unit of measurement'
    )
    dimensions = models.CharField(
        max_length=255,
        blank=True,
        verbose_name='Dimensions'
    )

    # Status
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )
    is_featured = models.BooleanField(
        default=False,
        verbose_name='Featured'
    )
    has_variations = models.BooleanField(
        default=False,
        verbose_name='Has variations'
    )

    product_attributes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Attributes',
        help_text='JSON of {attribute_id: "value1,value2"}'
    )
    store_locations = models.ManyToManyField(
        'catalog.StoreLocation',
        through='ProductStoreLocation',
        blank=True,
        related_name='products',
        verbose_name='Store locations'
    )
    view_count = models.PositiveIntegerField(
        default=0,
        verbose_name='Views'
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        verbose_name='Updated at'
    )

    # History tracking
    history = HistoricalRecords()

    class Meta:
        ordering = ['name']
        verbose_name = 'Product'
        verbose_name_plural = 'Products'

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            from apps.catalog.services.slugs import generate_slug, unique_slug
            self.slug = unique_slug(Product, generate_slug(self.name), exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def cover_image(self):
        return self.images[0] if self.images else None

    @property
    def discounted_price(self):
        if not self.discount:
            return self.price
        return (self.price * (Decimal('100') - self.discount) / Decimal('100')).quantize(Decimal('0.01'))

    @property
    def variation_count(self):
        return self.variations.count()

    def get_all_categories(self):
        """Get the product category together with its ancestors."""
        if not self.category:
            return []
        return self.category.get_ancestors() + [self.category]


class ProductStoreLocation(models.Model):
    """Store locations where a product is on display."""
    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        verbose_name='Product'
    )
    store_location = models.ForeignKey(
        'catalog.StoreLocation',
        on_delete=models.CASCADE,
        verbose_name='Store location'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['product', 'store_location']
        verbose_name = 'Product store location'
        verbose_name_plural = 'Product store locations'

    def __str__(self):
        return f"{self.product_id} @ {self.store_location_id}"
