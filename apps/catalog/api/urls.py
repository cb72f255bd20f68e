from django.urls import path, include
from rest_framework.routers import DefaultRouter

from . import dashboard, store

router = DefaultRouter()

# Store
router.register(r'store/products', store.StoreProductViewSet, basename='store-product')
router.register(r'store/categories', store.StoreCategoryViewSet, basename='store-category')
router.register(r'store/brands', store.StoreBrandViewSet, basename='store-brand')
router.register(r'store/collections', store.StoreCollectionViewSet, basename='store-collection')

# Dashboard
router.register(r'dashboard/brands', dashboard.BrandViewSet, basename='dashboard-brand')
router.register(r'dashboard/categories', dashboard.CategoryViewSet, basename='dashboard-category')
router.register(r'dashboard/collections', dashboard.CollectionViewSet, basename='dashboard-collection')
router.register(r'dashboard/countries', dashboard.CountryViewSet, basename='dashboard-country')
router.register(r'dashboard/store-locations', dashboard.StoreLocationViewSet, basename='dashboard-store-location')
router.register(r'dashboard/attributes', dashboard.ProductAttributeViewSet, basename='dashboard-attribute')
router.register(r'dashboard/attribute-values', dashboard.AttributeValueViewSet, basename='dashboard-attribute-value')
router.register(r'dashboard/products', dashboard.ProductViewSet, basename='dashboard-product')

urlpatterns = [
    path('store/attribute-values/', store.store_attribute_values, name='store-attribute-values'),
    path('store/search-suggestions/', store.search_suggestions, name='store-search-suggestions'),
    path('store/store-locations/', store.store_locations, name='store-store-locations'),
    path('query-options/', store.query_options, name='query-options'),
    path('dashboard/totals/', dashboard.dashboard_totals, name='dashboard-totals'),
    path('dashboard/images/', dashboard.upload_image, name='dashboard-image-upload'),
    path('dashboard/images/delete/', dashboard.delete_image, name='dashboard-image-delete'),
    path('dashboard/images/promote/', dashboard.promote_images, name='dashboard-image-promote'),
    path('', include(router.urls)),
]
