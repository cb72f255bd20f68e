from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import OrderViewSet, cart_detail, cart_items, checkout

router = SimpleRouter()
router.register(r'dashboard/orders', OrderViewSet, basename='dashboard-order')

urlpatterns = [
    path('cart/', cart_detail, name='cart'),
    path('cart/items/', cart_items, name='cart-items'),
    path('checkout/', checkout, name='checkout'),
    path('', include(router.urls)),
]
