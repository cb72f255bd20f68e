from django.contrib import admin
from django.utils import timezone

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    fields = ['product', 'variation', 'quantity', 'unit_amount', 'discount_percentage', 'final_amount', 'attributes']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'customer_email', 'status', 'payment_status', 'total_amount',
        'currency', 'shipping_method', 'created_at'
    ]
    list_filter = ['status', 'payment_status', 'shipping_method', 'created_at']
    list_editable = ['status', 'payment_status']
    search_fields = ['id', 'customer_info', 'notes']
    readonly_fields = [
        'subtotal_amount', 'discount_amount', 'shipping_amount', 'total_amount',
        'currency', 'customer_info', 'created_at', 'completed_at'
    ]
    date_hierarchy = 'created_at'
    inlines = [OrderItemInline]

    actions = ['mark_completed', 'mark_cancelled']

    @admin.action(description='Mark selected orders as completed')
    def mark_completed(self, request, queryset):
        count = queryset.update(status=Order.STATUS_COMPLETED, completed_at=timezone.now())
        self.message_user(request, f'{count} orders completed.')

    @admin.action(description='Mark selected orders as cancelled')
    def mark_cancelled(self, request, queryset):
        count = queryset.update(status=Order.STATUS_CANCELLED, completed_at=None)
        self.message_user(request, f'{count} orders cancelled.')
