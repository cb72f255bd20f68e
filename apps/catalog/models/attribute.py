from django.db import models


class ProductAttribute(models.Model):
    """
    Attribute definitions that can be added at runtime.
    Examples: Color, Size (cm), Thickness, Material.

    Standardized attributes only accept values from AttributeValue;
    free-text attributes accept anything.
    """
    VALUE_TYPE_FREE_TEXT = 'free-text'
    VALUE_TYPE_STANDARDIZED = 'standardized'
    VALUE_TYPE_BOTH = 'both'

    VALUE_TYPE_CHOICES = [
        (VALUE_TYPE_FREE_TEXT, 'Free text'),
        (VALUE_TYPE_STANDARDIZED, 'Standardized'),
        (VALUE_TYPE_BOTH, 'Both'),
    ]

    name = models.CharField(
        max_length=100,
        unique=True,
        verbose_name='Name'
    )
    slug = models.SlugField(
        max_length=100,
        unique=True,
        verbose_name='Slug'
    )
    value_type = models.CharField(
        max_length=20,
        choices=VALUE_TYPE_CHOICES,
        default=VALUE_TYPE_FREE_TEXT,
        verbose_name='Value type'
    )
    allow_multiple_values = models.BooleanField(
        default=False,
        verbose_name='Allow multiple values'
    )

    class Meta:
        ordering = ['name']
        verbose_name = 'Product attribute'
        verbose_name_plural = 'Product attributes'

    def __str__(self):
        return self.name

    @property
    def is_standardized(self):
        return self.value_type in (self.VALUE_TYPE_STANDARDIZED, self.VALUE_TYPE_BOTH)


class AttributeValue(models.Model):
    """
    Allowed value of a standardized attribute.

    Examples:
        - Attribute "Material" -> "Oak", "PVC tile"
        - Attribute "Color" -> "White", "Walnut"
    """
    attribute = models.ForeignKey(
        ProductAttribute,
        on_delete=models.CASCADE,
        related_name='values',
        verbose_name='Attribute'
    )
    value = models.CharField(
        max_length=200,
        verbose_name='Value'
    )
    slug = models.SlugField(
        max_length=200,
        blank=True,
        verbose_name='Slug'
    )
    sort_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Sort order'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        ordering = ['sort_order', 'value']
        unique_together = ['attribute', 'value']
        verbose_name = 'Attribute value'
        verbose_name_plural = 'Attribute values'

    def __str__(self):
        return f"{self.attribute.name}: {self.value}"

    def save(self, *args, **kwargs):
        if not self.slug:
            from apps.catalog.services.slugs import generate_slug
            self.slug = generate_slug(self.value)
        super().save(*args, **kwargs)


class ProductAttributeValue(models.Model):
    """
    Normalized copy of a product's standardized attribute values.
    Rebuilt from Product.product_attributes on save; used for store filtering.
    """
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='attribute_values',
        verbose_name='Product'
    )
    attribute = models.ForeignKey(
        ProductAttribute,
        on_delete=models.CASCADE,
        related_name='product_values',
        verbose_name='Attribute'
    )
    value = models.ForeignKey(
        AttributeValue,
        on_delete=models.CASCADE,
        related_name='product_values',
        verbose_name='Value'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ['product', 'attribute', 'value']
        indexes = [
            models.Index(fields=['attribute', 'value'], name='catalog_pav_attr_value_idx'),
            models.Index(fields=['product', 'attribute'], name='catalog_pav_product_attr_idx'),
        ]
        verbose_name = 'Product attribute value'
        verbose_name_plural = 'Product attribute values'

    def __str__(self):
        return f"{self.product_id} - {self.value}"
