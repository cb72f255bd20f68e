import logging

from django.db.models import Prefetch
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser
from rest_framework.response import Response

from apps.catalog.api.pagination import StorePagination
from apps.catalog.services.query_options import get_or_fetch
from apps.orders.cart import Cart
from apps.orders.exceptions import CartError
from apps.orders.models import Order, OrderItem
from apps.orders.services.checkout import create_order
from apps.orders.services.notifications import send_order_emails
from .serializers import (
    CartItemInputSerializer,
    CartItemSerializer,
    CheckoutSerializer,
    OrderSerializer,
)

logger = logging.getLogger(__name__)


def _cart_response(cart, response_status=status.HTTP_200_OK):
    enriched = cart.enriched_items()
    totals = cart.totals(enriched)
    return Response({
        'items': CartItemSerializer(enriched, many=True).data,
        'item_count': cart.item_count(enriched),
        'subtotal': str(totals['subtotal']),
        'discount_total': str(totals['discount_total']),
        'total': str(totals['total']),
    }, status=response_status)


@api_view(['GET', 'DELETE'])
@permission_classes([AllowAny])
def cart_detail(request):
    """Current cart with prices from the catalog. DELETE empties it."""
    cart = Cart(request.session)
    if request.method == 'DELETE':
        cart.clear()
    return _cart_response(cart)


@api_view(['POST', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def cart_items(request):
    """
    POST: add {product_id, variation_id?, quantity}
    PATCH: set the quantity of a line (0 removes it)
    DELETE: remove a line
    """
    data = request.data if request.data else request.query_params
    serializer = CartItemInputSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    product_id = serializer.validated_data['product_id']
    variation_id = serializer.validated_data.get('variation_id')
    quantity = serializer.validated_data['quantity']

    cart = Cart(request.session)
    try:
        if request.method == 'POST':
            cart.add_product(product_id, quantity, variation_id)
            return _cart_response(cart, status.HTTP_201_CREATED)
        if request.method == 'PATCH':
            cart.update_quantity(product_id, quantity, variation_id)
        else:
            cart.remove(product_id, variation_id)
    except CartError as e:
        return Response({'error': e.message}, status=e.status_code)
    return _cart_response(cart)


@api_view(['POST'])
@permission_classes([AllowAny])
def checkout(request):
    """Create an order from the cart and send the confirmation emails."""
    serializer = CheckoutSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    cart = Cart(request.session)
    try:
        order = create_order(
            cart,
            serializer.customer_info(),
            shipping_method=serializer.validated_data['shipping_method'],
            notes=serializer.validated_data['notes'],
            payment_method=serializer.validated_data['payment_method'],
        )
    except CartError as e:
        return Response({'error': e.message}, status=e.status_code)

    warnings = send_order_emails(order)
    return Response({
        'order': OrderSerializer(order).data,
        'warnings': warnings,
    }, status=status.HTTP_201_CREATED)


class OrderViewSet(mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   mixins.UpdateModelMixin,
                   viewsets.GenericViewSet):
    """
    Dashboard orders.

    list: ?status=&payment_status= filters, newest first
    partial_update: change status or payment status
    """
    permission_classes = [IsAdminUser]
    serializer_class = OrderSerializer
    pagination_class = StorePagination
    filterset_fields = ['status', 'payment_status']

    def get_queryset(self):
        return Order.objects.prefetch_related(
            Prefetch('items', queryset=OrderItem.objects.select_related('product'))
        )

    def list(self, request, *args, **kwargs):
        def fetch():
            queryset = self.filter_queryset(self.get_queryset())
            page = self.paginate_queryset(queryset)
            serializer = self.get_serializer(page, many=True)
            return self.paginator.get_paginated_data(serializer.data)

        params = tuple(sorted(request.query_params.items()))
        return Response(get_or_fetch('orders', fetch, *params))

    def perform_update(self, serializer):
        order = serializer.save()
        logger.info("Order %s updated: status=%s payment=%s", order.pk, order.status, order.payment_status)
