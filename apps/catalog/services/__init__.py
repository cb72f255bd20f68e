from .variation_selection import VariationSelectionService

__all__ = ['VariationSelectionService']
