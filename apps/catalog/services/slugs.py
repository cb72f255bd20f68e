"""
Slug helpers shared by every entity that has a public URL.
Supports Russian (Cyrillic) to Latin transliteration.
"""

import re

CYRILLIC_TO_LATIN = {
    'а': 'a', 'б': 'b', 'в': 'v', 'г': 'g', 'д': 'd', 'е': 'e', 'ё': 'yo',
    'ж': 'zh', 'з': 'z', 'и': 'i', 'й': 'y', 'к': 'k', 'л': 'l', 'м': 'm',
    'н': 'n', 'о': 'o', 'п': 'p', 'р': 'r', 'с': 's', 'т': 't', 'у': 'u',
    'ф': 'f', 'х': 'kh', 'ц': 'ts', 'ч': 'ch', 'ш': 'sh', 'щ': 'shch',
    'ъ': '', 'ы': 'y', 'ь': '', 'э': 'e', 'ю': 'yu', 'я': 'ya',
}

_INVALID_CHARS = re.compile(r'[^\w\s-]', re.ASCII)
_WHITESPACE = re.compile(r'\s+')
_DASHES = re.compile(r'-+')


def generate_slug(text):
    """
    Generate a URL slug from any text.

    Example:
        generate_slug('Паркет Дуб 2') -> 'parket-dub-2'
    """
    if not text:
        return ''
    slug = ''.join(CYRILLIC_TO_LATIN.get(char, char) for char in text.lower())
    slug = _INVALID_CHARS.sub('', slug)
    slug = _WHITESPACE.sub('-', slug)
    slug = _DASHES.sub('-', slug)
    return slug.strip('-')


def is_custom_slug(slug, source):
    """True when the slug was edited by hand instead of generated from source."""
    return bool(slug) and slug != generate_slug(source or '')


def unique_slug(model, base_slug, exclude_pk=None, field='slug'):
    """Return base_slug or base_slug-N so that no other row of model uses it."""
    base_slug = base_slug or 'item'
    queryset = model._default_manager.all()
    if exclude_pk is not None:
        queryset = queryset.exclude(pk=exclude_pk)

    slug = base_slug
    counter = 1
    while queryset.filter(**{field: slug}).exists():
        slug = f"{base_slug}-{counter}"
        counter += 1
    return slug
