from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from apps.catalog.services.images import image_url
from apps.orders.models import Order, OrderItem
from apps.orders.services.checkout import line_final_amount


class CartItemSerializer(serializers.Serializer):
    """Enriched cart line, see Cart.enriched_items()."""
    product_id = serializers.IntegerField()
    variation_id = serializers.IntegerField(allow_null=True)
    quantity = serializers.IntegerField()
    product_name = serializers.CharField()
    product_slug = serializers.CharField()
    sku = serializers.CharField(allow_blank=True)
    image_url = serializers.SerializerMethodField()
    unit_of_measurement = serializers.CharField()
    price = serializers.DecimalField(max_digits=10, decimal_places=2)
    discount = serializers.DecimalField(max_digits=5, decimal_places=2, allow_null=True)
    attributes = serializers.DictField(child=serializers.CharField())
    line_total = serializers.SerializerMethodField()

    def get_image_url(self, item):
        return image_url(item['image'])

    def get_line_total(self, item):
        return str(line_final_amount(item['price'], item['discount'], item['quantity']))


class CartItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variation_id = serializers.IntegerField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, default=1)


class CheckoutSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=50)
    address = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    city = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    postal_code = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    shipping_method = serializers.CharField(required=False, default='standard')
    payment_method = serializers.CharField(required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_shipping_method(self, value):
        if value not in settings.STORE_SHIPPING_RATES:
            raise serializers.ValidationError(f'Unknown shipping method: {value}')
        return value

    def validate(self, attrs):
        if attrs['shipping_method'] != 'pickup' and not attrs['address'].strip():
            raise serializers.ValidationError({'address': 'Address is required for delivery'})
        return attrs

    def customer_info(self):
        fields = ['name', 'email', 'phone', 'address', 'city', 'postal_code']
        return {field: self.validated_data[field] for field in fields}


class OrderItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_slug = serializers.CharField(source='product.slug', read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            'id', 'product', 'product_name', 'product_slug', 'variation',
            'quantity', 'unit_amount', 'discount_percentage', 'final_amount', 'attributes'
        ]


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'status', 'payment_status', 'payment_method', 'shipping_method',
            'subtotal_amount', 'discount_amount', 'shipping_amount', 'total_amount',
            'currency', 'customer_info', 'notes', 'item_count', 'items',
            'created_at', 'completed_at'
        ]
        read_only_fields = [
            'payment_method', 'shipping_method', 'subtotal_amount', 'discount_amount',
            'shipping_amount', 'total_amount', 'currency', 'customer_info',
            'created_at', 'completed_at'
        ]

    def update(self, instance, validated_data):
        status = validated_data.get('status')
        if status == Order.STATUS_COMPLETED and instance.status != Order.STATUS_COMPLETED:
            validated_data['completed_at'] = timezone.now()
        elif status and status != Order.STATUS_COMPLETED:
            validated_data['completed_at'] = None
        return super().update(instance, validated_data)
