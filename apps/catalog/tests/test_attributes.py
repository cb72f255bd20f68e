from django.test import TestCase

from apps.catalog.models import Product, ProductAttribute, ProductAttributeValue, VariationAttribute
from apps.catalog.services.attributes import (
    cleanup_value_from_products,
    count_products_with_attribute_errors,
    parse_product_attributes,
    rename_value_in_products,
    split_values,
    validate_attribute_values,
)
from apps.catalog.tests.factories import TestDataFactory


class ParseAttributesTests(TestCase):

    def test_split_values(self):
        self.assertEqual(split_values('Oak, Ash ,'), ['Oak', 'Ash'])
        self.assertEqual(split_values(None), [])
        self.assertEqual(split_values(12), ['12'])

    def test_dict_and_list_forms(self):
        expected = [{'attribute_id': '3', 'value': 'Oak'}]
        self.assertEqual(parse_product_attributes({'3': 'Oak'}), expected)
        self.assertEqual(parse_product_attributes([{'attributeId': 3, 'value': 'Oak'}]), expected)
        self.assertEqual(parse_product_attributes('{"3": "Oak"}'), expected)

    def test_garbage_is_empty(self):
        self.assertEqual(parse_product_attributes('not json'), [])
        self.assertEqual(parse_product_attributes(None), [])
        self.assertEqual(parse_product_attributes(42), [])


class AttributeValueMaintenanceTests(TestCase):

    def setUp(self):
        self.material = TestDataFactory.create_attribute(
            name='Material', value_type=ProductAttribute.VALUE_TYPE_STANDARDIZED
        )
        self.oak = TestDataFactory.create_attribute_value(self.material, 'Oak')
        self.ash = TestDataFactory.create_attribute_value(self.material, 'Ash')
        self.note = TestDataFactory.create_attribute(name='Note')
        self.key = str(self.material.id)

    def test_validation_accepts_known_values(self):
        errors = validate_attribute_values([{'attribute_id': self.key, 'value': 'Oak, Ash'}])
        self.assertEqual(errors, [])

    def test_validation_rejects_unknown_values(self):
        errors = validate_attribute_values([{'attribute_id': self.key, 'value': 'Oak, Pine'}])
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0]['value'], 'Pine')

    def test_validation_rejects_inactive_values(self):
        self.ash.is_active = False
        self.ash.save()
        errors = validate_attribute_values([{'attribute_id': self.key, 'value': 'Ash'}])
        self.assertEqual(len(errors), 1)

    def test_free_text_is_not_validated(self):
        errors = validate_attribute_values([{'attribute_id': str(self.note.id), 'value': 'anything'}])
        self.assertEqual(errors, [])

    def test_save_syncs_normalized_rows(self):
        product = TestDataFactory.create_product(product_attributes={self.key: 'Oak,Ash,Pine'})
        rows = ProductAttributeValue.objects.filter(product=product)
        self.assertEqual(set(rows.values_list('value__value', flat=True)), {'Oak', 'Ash'})

        product.product_attributes = {self.key: 'Ash'}
        product.save()
        self.assertEqual(list(rows.values_list('value__value', flat=True)), ['Ash'])

    def test_cleanup_removes_value_everywhere(self):
        product = TestDataFactory.create_product(product_attributes={self.key: 'Oak,Ash'})
        other = TestDataFactory.create_product(name='Ash board', product_attributes={self.key: 'Ash'})
        TestDataFactory.create_variation(product, attributes={self.material: 'Oak'})

        result = cleanup_value_from_products(self.material, 'Oak')

        self.assertEqual(result['updated_count'], 1)
        self.assertEqual(result['product_ids'], [product.pk])
        self.assertEqual(result['variation_count'], 1)
        product.refresh_from_db()
        self.assertEqual(product.product_attributes, {self.key: 'Ash'})
        other.refresh_from_db()
        self.assertEqual(other.product_attributes, {self.key: 'Ash'})
        self.assertFalse(VariationAttribute.objects.filter(value='Oak').exists())

    def test_cleanup_drops_emptied_key(self):
        product = TestDataFactory.create_product(product_attributes={self.key: 'Oak'})
        cleanup_value_from_products(self.material, 'Oak')
        product.refresh_from_db()
        self.assertEqual(product.product_attributes, {})
        self.assertFalse(ProductAttributeValue.objects.filter(product=product).exists())

    def test_rename_updates_products_and_variations(self):
        product = TestDataFactory.create_product(product_attributes={self.key: 'Oak,Ash'})
        variation = TestDataFactory.create_variation(product, attributes={self.material: 'Oak'})
        self.oak.value = 'Natural oak'
        self.oak.save()

        result = rename_value_in_products(self.material, 'Oak', 'Natural oak')

        self.assertEqual(result['updated_count'], 1)
        self.assertEqual(result['variation_count'], 1)
        product.refresh_from_db()
        self.assertEqual(product.product_attributes, {self.key: 'Natural oak,Ash'})
        self.assertEqual(variation.attributes.get().value, 'Natural oak')
        self.assertTrue(
            ProductAttributeValue.objects.filter(product=product, value=self.oak).exists()
        )

    def test_rename_to_same_value_is_noop(self):
        TestDataFactory.create_product(product_attributes={self.key: 'Oak'})
        result = rename_value_in_products(self.material, 'Oak', 'Oak')
        self.assertEqual(result['updated_count'], 0)

    def test_count_products_with_unknown_attributes(self):
        TestDataFactory.create_product(product_attributes={self.key: 'Oak'})
        broken = TestDataFactory.create_product(name='Broken', product_attributes={'999999': 'x'})
        TestDataFactory.create_product(name='Plain')

        result = count_products_with_attribute_errors()

        self.assertEqual(result, {'count': 1, 'product_ids': [broken.pk]})
        self.assertEqual(Product.objects.count(), 3)
