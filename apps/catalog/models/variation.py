from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from simple_history.models import HistoricalRecords


class ProductVariation(models.Model):
    """
    A concrete SKU of a product with its own price.
    Each variation is a combination of attribute values.
    """
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='variations',
        verbose_name='Product'
    )
    sku = models.CharField(
        max_length=100,
        blank=True,
        verbose_name='SKU'
    )
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
    sort = models.IntegerField(
        default=0,
        verbose_name='Sort'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    # History tracking
    history = HistoricalRecords()

    class Meta:
        ordering = ['product', '-sort', 'id']
        verbose_name = 'Product variation'
        verbose_name_plural = 'Product variations'

    def __str__(self):
        return self.sku or f"{self.product.name} #{self.pk}"

    def get_attributes_dict(self):
        """Return dict of {attribute_id: value}."""
        return {va.attribute_id: va.value for va in self.attributes.all()}

    @property
    def discounted_price(self):
        if not self.discount:
            return self.price
        return (self.price * (Decimal('100') - self.discount) / Decimal('100')).quantize(Decimal('0.01'))


class VariationAttribute(models.Model):
    """
    Attribute value carried by a variation.
    Ensures each variation has only one value per attribute.
    """
    variation = models.ForeignKey(
        ProductVariation,
        on_delete=models.CASCADE,
        related_name='attributes',
        verbose_name='Variation'
    )
    attribute = models.ForeignKey(
        'catalog.ProductAttribute',
        on_delete=models.CASCADE,
        related_name='variation_values',
        verbose_name='Attribute'
    )
    value = models.CharField(
        max_length=200,
        verbose_name='Value'
    )

    class Meta:
        unique_together = ['variation', 'attribute']
        verbose_name = 'Variation attribute'
        verbose_name_plural = 'Variation attributes'

    def __str__(self):
        return f"{self.variation_id} - {self.attribute_id}: {self.value}"

    def save(self, *args, **kwargs):
        # Only one value per attribute per variation
        VariationAttribute.objects.filter(
            variation=self.variation,
            attribute=self.attribute
        ).exclude(pk=self.pk).delete()
        super().save(*args, **kwargs)
