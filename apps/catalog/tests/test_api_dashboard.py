"""
Dashboard API tests: staff access, entity CRUD rules, product saves.
"""
import base64
import io
import shutil
import tempfile
from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.core.files.storage import default_storage
from django.db import DatabaseError
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework import status
from rest_framework.test import APIClient

from apps.catalog.models import (
    AttributeValue,
    Brand,
    Product,
    ProductAttribute,
    ProductAttributeValue,
    ProductVariation,
)
from apps.catalog.tests.factories import TestDataFactory


class DashboardTestCase(TestCase):

    def setUp(self):
        cache.clear()
        self.staff = TestDataFactory.create_staff_user()
        self.client = APIClient()
        self.client.force_authenticate(user=self.staff)


class DashboardAccessTests(TestCase):

    def test_anonymous_is_rejected(self):
        response = APIClient().get('/api/dashboard/brands/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_customer_is_rejected(self):
        client = APIClient()
        client.force_authenticate(user=TestDataFactory.create_user())
        self.assertEqual(client.get('/api/dashboard/totals/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(client.get('/api/dashboard/products/').status_code, status.HTTP_403_FORBIDDEN)


class DashboardEntityTests(DashboardTestCase):

    def test_create_brand_generates_slug(self):
        response = self.client.post('/api/dashboard/brands/', {'name': 'Quick Step'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'quick-step')
        self.assertEqual(response.data['warnings'], [])

    def test_brand_list_is_invalidated_by_create(self):
        self.assertEqual(self.client.get('/api/dashboard/brands/').data, [])
        TestDataFactory.create_brand()
        self.assertEqual(len(self.client.get('/api/dashboard/brands/').data), 1)

    def test_brand_in_use_cannot_be_deleted(self):
        brand = TestDataFactory.create_brand()
        TestDataFactory.create_product(brand=brand)

        response = self.client.delete(f'/api/dashboard/brands/{brand.id}/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error'], 'Cannot delete brand: there are products using this brand')
        self.assertEqual(response.data['details'], {'product_count': 1})
        self.assertTrue(Brand.objects.filter(pk=brand.pk).exists())

    def test_delete_unused_brand(self):
        brand = TestDataFactory.create_brand()
        response = self.client.delete(f'/api/dashboard/brands/{brand.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'message': 'Brand deleted', 'warnings': []})

    def test_country_with_brands_cannot_be_deleted(self):
        country = TestDataFactory.create_country()
        TestDataFactory.create_brand(country=country)
        response = self.client.delete(f'/api/dashboard/countries/{country.id}/')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_country_code_is_normalized(self):
        response = self.client.post('/api/dashboard/countries/', {'name': 'Германия', 'code': 'de'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['code'], 'DE')

        response = self.client.post('/api/dashboard/countries/', {'name': 'X', 'code': 'XYZ'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_category_cannot_move_under_descendant(self):
        floors = TestDataFactory.create_category(name='Floors')
        TestDataFactory.create_category(name='Parquet', parent=floors)

        response = self.client.patch(
            f'/api/dashboard/categories/{floors.id}/', {'parent_slug': 'parquet'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('parent_slug', response.data)

    def test_category_counts(self):
        floors = TestDataFactory.create_category(name='Floors')
        TestDataFactory.create_product(category=floors)
        TestDataFactory.create_product(name='Other', category=floors)
        response = self.client.get('/api/dashboard/categories/counts/')
        self.assertEqual(response.data, {str(floors.id): 2})

    def test_attribute_used_by_variation_cannot_be_deleted(self):
        size = TestDataFactory.create_attribute(name='Size')
        product = TestDataFactory.create_product(has_variations=True)
        TestDataFactory.create_variation(product, attributes={size: '12'})

        response = self.client.delete(f'/api/dashboard/attributes/{size.id}/')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(ProductAttribute.objects.filter(pk=size.pk).exists())

    def test_attribute_counts_follow_new_variations(self):
        size = TestDataFactory.create_attribute(name='Size')
        first = TestDataFactory.create_product(name='First', has_variations=True)
        TestDataFactory.create_variation(first, attributes={size: '12'})
        response = self.client.get('/api/dashboard/attributes/counts/')
        self.assertEqual(response.data, {str(size.id): 1})

        second = TestDataFactory.create_product(name='Second', has_variations=True)
        TestDataFactory.create_variation(second, attributes={size: '14'})

        response = self.client.get('/api/dashboard/attributes/counts/')
        self.assertEqual(response.data, {str(size.id): 2})

    def test_attribute_value_rejects_comma(self):
        material = TestDataFactory.create_attribute(name='Material')
        response = self.client.post(
            '/api/dashboard/attribute-values/',
            {'attribute': material.id, 'value': 'Oak, Ash'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AttributeValueRewriteTests(DashboardTestCase):

    def setUp(self):
        super().setUp()
        self.material = TestDataFactory.create_attribute(
            name='Material', value_type=ProductAttribute.VALUE_TYPE_STANDARDIZED
        )
        self.oak = TestDataFactory.create_attribute_value(self.material, 'Oak')
        self.key = str(self.material.id)
        self.product = TestDataFactory.create_product(product_attributes={self.key: 'Oak'})

    def test_rename_rewrites_products(self):
        response = self.client.patch(
            f'/api/dashboard/attribute-values/{self.oak.id}/', {'value': 'Natural oak'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['products_updated']['updated_count'], 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.product_attributes, {self.key: 'Natural oak'})

    def test_delete_removes_value_from_products(self):
        response = self.client.delete(f'/api/dashboard/attribute-values/{self.oak.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['products_updated']['product_ids'], [self.product.id])
        self.assertFalse(AttributeValue.objects.filter(pk=self.oak.pk).exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.product_attributes, {})

    def test_filter_by_attribute(self):
        other = TestDataFactory.create_attribute(name='Color')
        TestDataFactory.create_attribute_value(other, 'White')
        response = self.client.get(f'/api/dashboard/attribute-values/?attribute={self.material.id}')
        self.assertEqual([item['value'] for item in response.data], ['Oak'])

    def test_new_value_appears_in_attribute_list(self):
        response = self.client.get('/api/dashboard/attributes/')
        self.assertEqual([v['value'] for v in response.data[0]['values']], ['Oak'])

        response = self.client.post(
            '/api/dashboard/attribute-values/',
            {'attribute': self.material.id, 'value': 'Ash'},
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/dashboard/attributes/')
        self.assertIn('Ash', [v['value'] for v in response.data[0]['values']])

    def oak_board(self):
        board = TestDataFactory.create_product(
            name='Oak board', has_variations=True, product_attributes={self.key: 'Oak'}
        )
        TestDataFactory.create_variation(board, attributes={self.material: 'Oak'})
        return f'/api/store/products/{board.slug}/'

    def test_rename_refreshes_store_product_page(self):
        url = self.oak_board()
        response = self.client.get(url)
        self.assertEqual([a['value'] for a in response.data['attributes']], ['Oak'])

        self.client.patch(
            f'/api/dashboard/attribute-values/{self.oak.id}/', {'value': 'Natural oak'}, format='json'
        )

        response = self.client.get(url)
        self.assertEqual([a['value'] for a in response.data['attributes']], ['Natural oak'])
        variation_values = [a['value'] for a in response.data['variations'][0]['attributes']]
        self.assertEqual(variation_values, ['Natural oak'])

    def test_delete_refreshes_store_product_page(self):
        url = self.oak_board()
        self.client.get(url)

        self.client.delete(f'/api/dashboard/attribute-values/{self.oak.id}/')

        response = self.client.get(url)
        self.assertEqual(response.data['attributes'], [])
        self.assertEqual(response.data['variations'][0]['attributes'], [])


class DashboardProductTests(DashboardTestCase):

    def setUp(self):
        super().setUp()
        self.floors = TestDataFactory.create_category(name='Floors')
        self.tarkett = TestDataFactory.create_brand(name='Tarkett')
        self.location = TestDataFactory.create_store_location()
        self.material = TestDataFactory.create_attribute(
            name='Material', value_type=ProductAttribute.VALUE_TYPE_STANDARDIZED
        )
        TestDataFactory.create_attribute_value(self.material, 'Oak')
        self.size = TestDataFactory.create_attribute(name='Size')

    def payload(self, **overrides):
        data = {
            'name': 'New floor',
            'price': '20.00',
            'unit_of_measurement': 'm2',
            'category': 'floors',
            'brand': 'tarkett',
            'has_variations': True,
            'images': ['products/floors/new-floor/cover.webp'],
            'attributes': [{'attribute_id': str(self.material.id), 'value': 'Oak'}],
            'variations': [
                {'sku': 'NF-12', 'price': '20.00', 'attributes': [
                    {'attributeId': str(self.size.id), 'value': '12'}
                ]},
                {'sku': 'NF-14', 'price': '24.00', 'discount': '10', 'attributes': [
                    {'attributeId': str(self.size.id), 'value': '14'}
                ]},
            ],
            'store_location_ids': [self.location.id],
        }
        data.update(overrides)
        return data

    def test_create_product(self):
        response = self.client.post('/api/dashboard/products/', self.payload(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['slug'], 'new-floor')
        self.assertEqual(response.data['warnings'], [])
        self.assertEqual(len(response.data['variations']), 2)
        self.assertEqual(len(response.data['store_locations']), 1)

        product = Product.objects.get(slug='new-floor')
        self.assertEqual(product.product_attributes, {str(self.material.id): 'Oak'})
        self.assertEqual(product.images, ['products/floors/new-floor/cover.webp'])
        self.assertTrue(ProductAttributeValue.objects.filter(product=product).exists())

    def test_unknown_standardized_value_is_rejected(self):
        payload = self.payload(attributes=[{'attribute_id': str(self.material.id), 'value': 'Pine'}])
        response = self.client.post('/api/dashboard/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('attributes', response.data)

    def test_duplicate_variation_skus_are_rejected(self):
        payload = self.payload()
        payload['variations'][1]['sku'] = 'NF-12'
        response = self.client.post('/api/dashboard/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Duplicate variation SKUs found: NF-12', str(response.data['variations']))

    def test_attribute_used_twice_in_variation_is_rejected(self):
        payload = self.payload()
        payload['variations'][0]['attributes'].append({'attribute_id': str(self.size.id), 'value': '14'})
        response = self.client.post('/api/dashboard/products/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_collection_of_other_brand_is_rejected(self):
        other = TestDataFactory.create_brand(name='Quick')
        TestDataFactory.create_collection(other, name='Classic')
        response = self.client.post(
            '/api/dashboard/products/', self.payload(collection='classic'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('collection', response.data)

    def test_update_syncs_variations(self):
        self.client.post('/api/dashboard/products/', self.payload(), format='json')
        product = Product.objects.get(slug='new-floor')
        kept = product.variations.get(sku='NF-12')

        response = self.client.patch(
            f'/api/dashboard/products/{product.id}/',
            {'variations': [
                {'id': kept.id, 'sku': 'NF-12', 'price': '22.00', 'attributes': [
                    {'attribute_id': str(self.size.id), 'value': '12'}
                ]},
                {'sku': 'NF-16', 'price': '30.00', 'attributes': [
                    {'attribute_id': str(self.size.id), 'value': '16'}
                ]},
            ]},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            sorted(product.variations.values_list('sku', flat=True)), ['NF-12', 'NF-16']
        )
        kept.refresh_from_db()
        self.assertEqual(kept.price, Decimal('22.00'))

    def test_turning_off_variations_deletes_them(self):
        self.client.post('/api/dashboard/products/', self.payload(), format='json')
        product = Product.objects.get(slug='new-floor')

        response = self.client.patch(
            f'/api/dashboard/products/{product.id}/', {'has_variations': False}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ProductVariation.objects.filter(product=product).exists())

    def test_list_and_attribute_errors(self):
        TestDataFactory.create_product(name='Broken', product_attributes={'999999': 'x'})
        TestDataFactory.create_product(name='Fine')

        response = self.client.get('/api/dashboard/products/?has_errors=true')
        self.assertEqual([item['name'] for item in response.data['results']], ['Broken'])

        response = self.client.get('/api/dashboard/products/attribute-errors/')
        self.assertEqual(response.data['count'], 1)

    def test_delete_product(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/dashboard/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Product deleted')
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_totals(self):
        TestDataFactory.create_product(brand=self.tarkett)
        TestDataFactory.create_product(name='Off', is_active=False)
        response = self.client.get('/api/dashboard/totals/')
        self.assertEqual(response.data['products'], 2)
        self.assertEqual(response.data['active_products'], 1)
        self.assertEqual(response.data['brands'], 1)
        self.assertEqual(response.data['orders'], 0)


class DashboardImageTests(DashboardTestCase):

    def setUp(self):
        super().setUp()
        self.media_root = tempfile.mkdtemp()
        self.override = override_settings(MEDIA_ROOT=self.media_root)
        self.override.enable()

    def tearDown(self):
        self.override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def png(self):
        buffer = io.BytesIO()
        Image.new('RGB', (8, 8), (10, 20, 30)).save(buffer, format='PNG')
        return base64.b64encode(buffer.getvalue()).decode()

    def test_upload_with_camel_case_keys(self):
        response = self.client.post('/api/dashboard/images/', {
            'fileData': self.png(),
            'fileName': 'Logo.png',
            'fileType': 'image/png',
            'folder': 'brands',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['filename'], 'brands/logo.webp')
        self.assertTrue(default_storage.exists('brands/logo.webp'))

    def test_upload_rejects_type(self):
        response = self.client.post('/api/dashboard/images/', {
            'fileData': self.png(), 'fileName': 'a.gif', 'fileType': 'image/gif',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid file type', response.data['error'])

    def test_brand_create_promotes_staging_image(self):
        staged = self.client.post('/api/dashboard/images/', {
            'fileData': self.png(), 'fileName': 'logo.png', 'fileType': 'image/png', 'folder': 'staging',
        }, format='json').data['filename']

        response = self.client.post(
            '/api/dashboard/brands/', {'name': 'Tarkett', 'image': staged}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['image'], 'brands/logo.webp')
        self.assertFalse(default_storage.exists(staged))

    def test_failed_brand_save_removes_promoted_image(self):
        staged = self.client.post('/api/dashboard/images/', {
            'fileData': self.png(), 'fileName': 'logo.png', 'fileType': 'image/png', 'folder': 'staging',
        }, format='json').data['filename']

        with mock.patch(
            'apps.catalog.api.serializers.BrandSerializer.create', side_effect=DatabaseError('write failed')
        ):
            with self.assertRaises(DatabaseError):
                self.client.post('/api/dashboard/brands/', {'name': 'Tarkett', 'image': staged}, format='json')

        self.assertFalse(default_storage.exists('brands/logo.webp'))
        self.assertFalse(Brand.objects.filter(name='Tarkett').exists())

    def test_delete_skips_referenced(self):
        response = self.client.post('/api/dashboard/images/delete/', {
            'filename': 'products/a.webp', 'current_images': ['products/a.webp'],
        }, format='json')
        self.assertTrue(response.data['skipped'])
