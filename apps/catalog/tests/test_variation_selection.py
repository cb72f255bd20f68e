from decimal import Decimal

from django.test import TestCase

from apps.catalog.services import VariationSelectionService
from apps.catalog.services.variation_selection import natural_key
from apps.catalog.tests.factories import TestDataFactory


class NaturalKeyTests(TestCase):

    def test_numbers_compare_numerically(self):
        values = ['10', '2', '1,5']
        self.assertEqual(sorted(values, key=natural_key), ['1,5', '2', '10'])

    def test_case_insensitive(self):
        self.assertEqual(sorted(['oak', 'Ash', 'birch'], key=natural_key), ['Ash', 'birch', 'oak'])

    def test_decimal_comma_equals_dot(self):
        self.assertEqual(natural_key('1,5'), natural_key('1.5'))


class VariationSelectionServiceTests(TestCase):
    """Product with Color x Size variations: Oak/12, Oak/14, Ash/12."""

    def setUp(self):
        self.color = TestDataFactory.create_attribute(name='Color')
        self.size = TestDataFactory.create_attribute(name='Size')
        self.unused = TestDataFactory.create_attribute(name='Material')
        self.product = TestDataFactory.create_product(has_variations=True)

        self.oak_12 = TestDataFactory.create_variation(
            self.product, Decimal('100.00'), sort=1,
            attributes={self.color: 'Oak', self.size: '12'}
        )
        self.oak_14 = TestDataFactory.create_variation(
            self.product, Decimal('120.00'), sort=3,
            attributes={self.color: 'Oak', self.size: '14'}
        )
        self.ash_12 = TestDataFactory.create_variation(
            self.product, Decimal('90.00'), sort=2,
            attributes={self.color: 'Ash', self.size: '12'}
        )
        self.variations = [self.oak_12, self.oak_14, self.ash_12]
        self.c = str(self.color.id)
        self.s = str(self.size.id)

    def test_attribute_ids(self):
        self.assertEqual(
            VariationSelectionService.attribute_ids(self.variations),
            [self.c, self.s]
        )

    def test_find_variation_needs_every_attribute(self):
        self.assertIsNone(VariationSelectionService.find_variation(self.variations, {self.c: 'Oak'}))
        self.assertEqual(
            VariationSelectionService.find_variation(self.variations, {self.c: 'Oak', self.s: '14'}),
            self.oak_14
        )

    def test_find_variation_without_match(self):
        self.assertIsNone(
            VariationSelectionService.find_variation(self.variations, {self.c: 'Ash', self.s: '14'})
        )

    def test_select_value_jumps_to_matching_variation(self):
        selection = VariationSelectionService.select_value(
            self.variations, {self.c: 'Oak', self.s: '12'}, self.s, '14'
        )
        self.assertEqual(selection, {self.c: 'Oak', self.s: '14'})

    def test_select_value_fills_other_attributes(self):
        selection = VariationSelectionService.select_value(self.variations, {}, self.c, 'Ash')
        self.assertEqual(selection, {self.c: 'Ash', self.s: '12'})

    def test_select_value_without_match_keeps_selection(self):
        current = {self.c: 'Oak', self.s: '14'}
        selection = VariationSelectionService.select_value(self.variations, current, self.c, 'Ash')
        self.assertEqual(selection, current)

    def test_initial_selection_card_uses_highest_sort(self):
        self.assertEqual(
            VariationSelectionService.initial_selection(self.variations),
            {self.c: 'Oak', self.s: '14'}
        )

    def test_initial_selection_page_needs_single_variation(self):
        self.assertEqual(VariationSelectionService.initial_selection(self.variations, single_only=True), {})
        self.assertEqual(
            VariationSelectionService.initial_selection([self.ash_12], single_only=True),
            {self.c: 'Ash', self.s: '12'}
        )
        self.assertEqual(VariationSelectionService.initial_selection([]), {})

    def test_available_values(self):
        values = VariationSelectionService.available_values(self.variations, {self.c: 'Ash'}, self.s)
        self.assertEqual(values, [
            {'value': '12', 'available': True, 'selected': False},
            {'value': '14', 'available': False, 'selected': False},
        ])

    def test_available_values_marks_selected(self):
        values = VariationSelectionService.available_values(
            self.variations, {self.c: 'Oak', self.s: '14'}, self.c
        )
        self.assertEqual(values, [
            {'value': 'Ash', 'available': False, 'selected': False},
            {'value': 'Oak', 'available': True, 'selected': True},
        ])

    def test_get_all_available_values(self):
        result = VariationSelectionService.get_all_available_values(self.variations, {})
        self.assertEqual(set(result), {self.c, self.s})
        self.assertTrue(all(item['available'] for item in result[self.c]))

    def test_sort_for_display(self):
        ordered = VariationSelectionService.sort_for_display(self.variations)
        self.assertEqual(ordered, [self.ash_12, self.oak_12, self.oak_14])

    def test_selection_from_query_ignores_unknown_and_unused(self):
        attributes = [self.color, self.size, self.unused]
        selection = VariationSelectionService.selection_from_query(
            {'color': 'Oak', 'size': '12', 'material': 'Wood', 'page': '2'},
            attributes,
            self.variations
        )
        self.assertEqual(selection, {self.c: 'Oak', self.s: '12'})

    def test_selection_to_query(self):
        query = VariationSelectionService.selection_to_query(
            {self.c: 'Oak', self.s: '12'}, [self.color, self.size]
        )
        self.assertEqual(query, {'color': 'Oak', 'size': '12'})
