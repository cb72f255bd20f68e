from django.test import SimpleTestCase, TestCase

from apps.catalog.services.category_tree import (
    build_category_tree,
    category_and_descendant_slugs,
    descendant_slugs,
    flatten_category_tree,
    would_create_circular_ref,
)
from apps.catalog.tests.factories import TestDataFactory


def node(slug, parent_slug=None, order=0):
    return {'id': slug, 'name': slug.title(), 'slug': slug, 'parent_slug': parent_slug, 'order': order}


class CategoryTreeTests(SimpleTestCase):

    def setUp(self):
        self.categories = [
            node('floors', order=1),
            node('walls', order=0),
            node('parquet', 'floors', order=1),
            node('laminate', 'floors', order=0),
            node('oak-parquet', 'parquet'),
        ]

    def test_build_nests_and_orders(self):
        tree = build_category_tree(self.categories)
        self.assertEqual([n['slug'] for n in tree], ['walls', 'floors'])
        floors = tree[1]
        self.assertEqual([n['slug'] for n in floors['children']], ['laminate', 'parquet'])
        self.assertEqual(floors['children'][1]['children'][0]['depth'], 2)

    def test_orphan_becomes_root(self):
        tree = build_category_tree([node('tiles', 'missing')])
        self.assertEqual(tree[0]['slug'], 'tiles')
        self.assertEqual(tree[0]['depth'], 0)

    def test_flatten_renumbers_depth_first(self):
        flat = flatten_category_tree(build_category_tree(self.categories))
        self.assertEqual(
            [(n['slug'], n['parent_slug'], n['order']) for n in flat],
            [
                ('walls', None, 0),
                ('floors', None, 1),
                ('laminate', 'floors', 2),
                ('parquet', 'floors', 3),
                ('oak-parquet', 'parquet', 4),
            ]
        )

    def test_descendants(self):
        self.assertEqual(
            descendant_slugs('floors', self.categories),
            ['parquet', 'laminate', 'oak-parquet']
        )
        self.assertEqual(descendant_slugs('walls', self.categories), [])

    def test_circular_reference(self):
        self.assertTrue(would_create_circular_ref('floors', 'floors', self.categories))
        self.assertTrue(would_create_circular_ref('floors', 'oak-parquet', self.categories))
        self.assertFalse(would_create_circular_ref('parquet', 'walls', self.categories))
        self.assertFalse(would_create_circular_ref('parquet', None, self.categories))

    def test_cycle_in_data_does_not_recurse_forever(self):
        tree = build_category_tree([node('a', 'b'), node('b', 'a')])
        self.assertEqual(tree, [])
        self.assertEqual(descendant_slugs('a', [node('a', 'b'), node('b', 'a')]), ['b'])


class CategoryModelTreeTests(TestCase):

    def test_descendant_slugs_from_database(self):
        floors = TestDataFactory.create_category(name='Floors')
        parquet = TestDataFactory.create_category(name='Parquet', parent=floors)
        TestDataFactory.create_category(name='Oak', parent=parquet)
        TestDataFactory.create_category(name='Walls')

        self.assertEqual(
            category_and_descendant_slugs('floors'),
            ['floors', 'parquet', 'oak']
        )
        self.assertEqual(parquet.full_path, 'Floors > Parquet')
