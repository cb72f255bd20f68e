from django.core.cache import cache
from django.test import TestCase

from apps.catalog.services import query_options
from apps.catalog.tests.factories import TestDataFactory


class QueryOptionsTests(TestCase):

    def setUp(self):
        cache.clear()
        self.calls = 0

    def fetch(self):
        self.calls += 1
        return {'calls': self.calls}

    def test_client_options_in_milliseconds(self):
        options = query_options.client_query_options()
        self.assertEqual(options['brands'], {
            'queryKey': ['brands'],
            'staleTime': 7 * 24 * 60 * 60 * 1000,
            'gcTime': 14 * 24 * 60 * 60 * 1000,
            'retry': 3,
            'refetchOnWindowFocus': False,
        })
        self.assertEqual(options['product']['retry'], 0)
        self.assertTrue(options['orders']['refetchOnWindowFocus'])

    def test_unknown_option(self):
        with self.assertRaises(KeyError):
            query_options.get_query_option('nope')

    def test_get_or_fetch_caches_per_params(self):
        first = query_options.get_or_fetch('brands', self.fetch, 'active')
        second = query_options.get_or_fetch('brands', self.fetch, 'active')
        other = query_options.get_or_fetch('brands', self.fetch, 'all')

        self.assertEqual(first, second)
        self.assertEqual(other, {'calls': 2})
        self.assertEqual(self.calls, 2)

    def test_invalidate_drops_every_variant(self):
        query_options.get_or_fetch('brands', self.fetch, 'active')
        query_options.get_or_fetch('brands', self.fetch, 'all')
        query_options.invalidate('brands')
        query_options.get_or_fetch('brands', self.fetch, 'active')
        query_options.get_or_fetch('brands', self.fetch, 'all')
        self.assertEqual(self.calls, 4)

    def test_invalidate_leaves_other_resources(self):
        query_options.get_or_fetch('countries', self.fetch)
        query_options.invalidate('brands')
        query_options.get_or_fetch('countries', self.fetch)
        self.assertEqual(self.calls, 1)

    def test_cached_query_decorator(self):
        @query_options.cached_query('categories')
        def load(active_only=True):
            return self.fetch()

        load(active_only=True)
        load(active_only=True)
        load(active_only=False)
        self.assertEqual(self.calls, 2)

    def test_model_save_invalidates_related_resources(self):
        query_options.get_or_fetch('brands', self.fetch)
        query_options.get_or_fetch('attribute_values', self.fetch)

        TestDataFactory.create_brand()

        query_options.get_or_fetch('brands', self.fetch)
        query_options.get_or_fetch('attribute_values', self.fetch)
        self.assertEqual(self.calls, 3)

    def test_invalidate_for_model(self):
        self.assertIn('totals', query_options.invalidate_for_model('Order'))
        self.assertEqual(query_options.invalidate_for_model('Unknown'), [])
