"""
Service for matching attribute selections to product variations.
Dependencies between attributes are INFERRED from actual variation data:
a value is only offered when some variation carries it together with the
rest of the current selection.

Selections are dicts of {attribute_id (str): value}, the same shape the
client keeps in its state and URLs carry (by attribute slug).
"""

import re
from typing import Dict, Iterable, List, Optional

from apps.catalog.models import ProductAttribute, ProductVariation

_DIGITS = re.compile(r'(\d+)')


def natural_key(value: str):
    """Numeric-aware, case-insensitive sort key. Decimal comma counts as a dot."""
    normalized = (value or '').strip().replace(',', '.', 1)
    key = []
    for part in _DIGITS.split(normalized):
        if not part:
            continue
        if part.isdigit():
            key.append((0, int(part), ''))
        else:
            key.append((1, 0, part.casefold()))
    return key


class VariationSelectionService:
    """
    Resolve attribute selections into variations for the store pages.
    Works on ProductVariation instances; prefetch 'attributes' to avoid
    a query per variation.
    """

    @staticmethod
    def get_pairs(variation: ProductVariation) -> Dict[str, str]:
        """Return {attribute_id: value} of a variation with string keys."""
        return {str(va.attribute_id): va.value for va in variation.attributes.all()}

    @staticmethod
    def attribute_ids(variations: Iterable[ProductVariation]) -> List[str]:
        """All attribute ids used by any variation, in first-seen order."""
        ids = []
        for variation in variations:
            for attribute_id in VariationSelectionService.get_pairs(variation):
                if attribute_id not in ids:
                    ids.append(attribute_id)
        return ids

    @staticmethod
    def matches(variation: ProductVariation, selection: Dict[str, str]) -> bool:
        pairs = VariationSelectionService.get_pairs(variation)
        return all(pairs.get(str(attr_id)) == value for attr_id, value in selection.items())

    @staticmethod
    def find_variation(
        variations: List[ProductVariation],
        selection: Dict[str, str]
    ) -> Optional[ProductVariation]:
        """
        Return the variation matching the selection.

        Only resolves once every attribute used by the product is selected;
        a partial selection returns None.
        """
        if not variations or not selection:
            return None

        required = VariationSelectionService.attribute_ids(variations)
        if not all(selection.get(attr_id) for attr_id in required):
            return None

        for variation in variations:
            if VariationSelectionService.matches(variation, selection):
                return variation
        return None

    @staticmethod
    def select_value(
        variations: List[ProductVariation],
        selection: Dict[str, str],
        attribute_id: str,
        value: str
    ) -> Dict[str, str]:
        """
        Apply a click on attribute_id=value.

        Merges the pair into the selection and jumps to the first variation
        carrying all pairs; the new selection is that variation's full
        attribute set. When no variation matches the selection is unchanged.

        Example:
            selection = {'1': 'Oak', '2': '12'}
            select_value(..., '2', '14')
            -> {'1': 'Oak', '2': '14'} when an Oak/14 variation exists
        """
        desired = dict(selection)
        desired[str(attribute_id)] = value

        for variation in variations:
            if VariationSelectionService.matches(variation, desired):
                return VariationSelectionService.get_pairs(variation)
        return dict(selection)

    @staticmethod
    def initial_selection(
        variations: List[ProductVariation],
        single_only: bool = False
    ) -> Dict[str, str]:
        """
        Default selection before the user clicks anything.

        Product cards pick the variation with the highest sort; the product
        page (single_only=True) only auto-selects when there is exactly one.
        """
        if not variations:
            return {}
        if single_only:
            if len(variations) != 1:
                return {}
            return VariationSelectionService.get_pairs(variations[0])

        # max() keeps the first of equal sorts, like a stable descending sort
        best = max(variations, key=lambda v: v.sort or 0)
        return VariationSelectionService.get_pairs(best)

    @staticmethod
    def available_values(
        variations: List[ProductVariation],
        selection: Dict[str, str],
        attribute_id: str
    ) -> List[Dict]:
        """
        Values of attribute_id in display order with availability flags.

        A value is available when some variation carries it together with
        every other selected pair.

        Returns:
            [{'value': 'Oak', 'available': True, 'selected': False}, ...]
        """
        attribute_id = str(attribute_id)
        others = {k: v for k, v in selection.items() if k != attribute_id}
        result = []
        seen = set()

        for variation in VariationSelectionService.sort_for_display(variations):
            pairs = VariationSelectionService.get_pairs(variation)
            value = pairs.get(attribute_id)
            if value is None or value in seen:
                continue
            seen.add(value)
            available = any(
                VariationSelectionService.matches(candidate, {**others, attribute_id: value})
                for candidate in variations
            )
            result.append({
                'value': value,
                'available': available,
                'selected': selection.get(attribute_id) == value,
            })
        return result

    @staticmethod
    def get_all_available_values(
        variations: List[ProductVariation],
        selection: Dict[str, str]
    ) -> Dict[str, List[Dict]]:
        """available_values for every attribute the product uses."""
        return {
            attr_id: VariationSelectionService.available_values(variations, selection, attr_id)
            for attr_id in VariationSelectionService.attribute_ids(
                VariationSelectionService.sort_for_display(variations)
            )
        }

    @staticmethod
    def selection_from_query(
        params: Dict[str, str],
        attributes: Iterable[ProductAttribute],
        variations: List[ProductVariation]
    ) -> Dict[str, str]:
        """
        Convert URL parameters {attribute_slug: value} to a selection.
        Unknown slugs and attributes no variation uses are ignored.
        """
        used = set(VariationSelectionService.attribute_ids(variations))
        by_slug = {attribute.slug: str(attribute.id) for attribute in attributes}

        selection = {}
        for param, value in params.items():
            if not value:
                continue
            attribute_id = by_slug.get(param)
            if attribute_id and attribute_id in used:
                selection[attribute_id] = value
        return selection

    @staticmethod
    def selection_to_query(
        selection: Dict[str, str],
        attributes: Iterable[ProductAttribute]
    ) -> Dict[str, str]:
        """Convert a selection back to URL parameters keyed by attribute slug."""
        by_id = {str(attribute.id): attribute.slug for attribute in attributes}
        return {by_id.get(attr_id, attr_id): value for attr_id, value in selection.items()}

    @staticmethod
    def sort_for_display(variations: List[ProductVariation]) -> List[ProductVariation]:
        """
        Order variations by their attribute values, attribute by attribute.
        Values compare naturally: '2' < '10', '1,5' == '1.5'.
        """
        variations = list(variations)
        if len(variations) <= 1:
            return variations

        attribute_ids = sorted(
            {attr_id for v in variations for attr_id in VariationSelectionService.get_pairs(v)},
            key=natural_key
        )

        def sort_key(variation):
            pairs = VariationSelectionService.get_pairs(variation)
            return [natural_key(pairs.get(attr_id, '')) for attr_id in attribute_ids]

        return sorted(variations, key=sort_key)
