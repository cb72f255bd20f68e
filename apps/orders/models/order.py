from decimal import Decimal

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Order(models.Model):
    """
    Checked-out cart.
    total_amount = subtotal_amount - discount_amount + shipping_amount
    """
    STATUS_PENDING = 'pending'
    STATUS_PROCESSING = 'processing'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_PROCESSING, 'Processing'),
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    PAYMENT_PENDING = 'pending'
    PAYMENT_PAID = 'paid'
    PAYMENT_REFUNDED = 'refunded'

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, 'Pending'),
        (PAYMENT_PAID, 'Paid'),
        (PAYMENT_REFUNDED, 'Refunded'),
    ]

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        verbose_name='Status'
    )

    # Amounts
    subtotal_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name='Subtotal',
        help_text='Base price before discounts'
    )
    discount_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name='Discount'
    )
    shipping_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        verbose_name='Shipping'
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name='Total'
    )
    currency = models.CharField(
        max_length=3,
        default='CAD',
        verbose_name='Currency'
    )

    # Payment and delivery
    payment_method = models.CharField(
        max_length=50,
        blank=True,
        verbose_name='Payment method'
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=PAYMENT_PENDING,
        verbose_name='Payment status'
    )
    shipping_method = models.CharField(
        max_length=50,
        blank=True,
        verbose_name='Shipping method'
    )

    customer_info = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Customer',
        help_text='Name, email, phone and address'
    )
    notes = models.TextField(
        blank=True,
        verbose_name='Notes'
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )
    completed_at = models.DateTimeField(
        null=True,
        blank=True,
        verbose_name='Completed at'
    )

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Order'
        verbose_name_plural = 'Orders'

    def __str__(self):
        return f"Order #{self.pk}"

    @property
    def customer_email(self):
        return (self.customer_info or {}).get('email', '')

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items.all())


class OrderItem(models.Model):
    """
    Order line with prices copied at checkout time.
    final_amount = unit_amount * (1 - discount_percentage / 100) * quantity
    """
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='items',
        verbose_name='Order'
    )
    product = models.ForeignKey(
        'catalog.Product',
        on_delete=models.CASCADE,
        related_name='order_items',
        verbose_name='Product'
    )
    variation = models.ForeignKey(
        'catalog.ProductVariation',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_items',
        verbose_name='Variation'
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        verbose_name='Quantity'
    )
    unit_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        verbose_name='Unit price'
    )
    discount_percentage = models.DecimalField(
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
    final_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        verbose_name='Final amount'
    )
    attributes = models.JSONField(
        default=dict,
        blank=True,
        verbose_name='Attributes',
        help_text='Variation attributes at checkout time'
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        verbose_name='Created at'
    )

    class Meta:
        ordering = ['id']
        verbose_name = 'Order item'
        verbose_name_plural = 'Order items'

    def __str__(self):
        return f"{self.order} - {self.product.name} x{self.quantity}"
