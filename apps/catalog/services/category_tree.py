"""
Category hierarchy helpers working on flat category lists.

Nodes are plain dicts so the dashboard tree editor can send them back
unchanged: {'id', 'name', 'slug', 'parent_slug', 'order', ...}.
"""
from typing import Dict, List, Optional


def category_to_node(category) -> Dict:
    return {
        'id': category.id,
        'name': category.name,
        'slug': category.slug,
        'parent_slug': category.parent.slug if category.parent_id else None,
        'image': category.image,
        'is_active': category.is_active,
        'order': category.display_order,
    }


def build_category_tree(categories: List[Dict]) -> List[Dict]:
    """
    Build nested nodes from a flat list.
    Each node gets 'children' and 'depth'; a missing parent makes the node a root.
    """
    nodes = {}
    for category in categories:
        nodes[category['slug']] = {**category, 'children': [], 'depth': 0}

    roots = []
    for category in categories:
        node = nodes[category['slug']]
        parent = nodes.get(category.get('parent_slug')) if category.get('parent_slug') else None
        if parent is None or parent is node:
            roots.append(node)
        else:
            parent['children'].append(node)

    def finish(level, depth, seen):
        level.sort(key=lambda n: n.get('order') or 0)
        for node in level:
            node['depth'] = depth
            seen.add(node['slug'])
            # Nodes already visited belong to a cycle; cut them off
            node['children'] = [child for child in node['children'] if child['slug'] not in seen]
            finish(node['children'], depth + 1, seen)

    finish(roots, 0, set())
    return roots


def flatten_category_tree(tree: List[Dict]) -> List[Dict]:
    """Flatten a tree back into a list, renumbering 'order' depth-first."""
    result = []
    order = 0

    def traverse(nodes, parent_slug):
        nonlocal order
        for node in nodes:
            flat = {k: v for k, v in node.items() if k not in ('children', 'depth')}
            flat['parent_slug'] = parent_slug
            flat['order'] = order
            order += 1
            result.append(flat)
            if node.get('children'):
                traverse(node['children'], node['slug'])

    traverse(tree, None)
    return result


def descendant_slugs(category_slug: str, categories: List[Dict]) -> List[str]:
    """Slugs of all descendants of a category, children first."""
    by_parent = {}
    for category in categories:
        by_parent.setdefault(category.get('parent_slug'), []).append(category['slug'])

    result = []
    seen = {category_slug}
    stack = list(by_parent.get(category_slug, []))
    while stack:
        slug = stack.pop(0)
        if slug in seen:
            continue
        seen.add(slug)
        result.append(slug)
        stack.extend(by_parent.get(slug, []))
    return result


def would_create_circular_ref(
    category_slug: str,
    new_parent_slug: Optional[str],
    categories: List[Dict]
) -> bool:
    """True when moving the category under new_parent_slug would form a cycle."""
    if not new_parent_slug:
        return False
    if category_slug == new_parent_slug:
        return True
    return new_parent_slug in descendant_slugs(category_slug, categories)


def category_nodes(queryset=None) -> List[Dict]:
    """All categories as flat nodes."""
    from apps.catalog.models import Category

    queryset = queryset if queryset is not None else Category.objects.select_related('parent')
    return [category_to_node(category) for category in queryset]


def category_and_descendant_slugs(category_slug: str) -> List[str]:
    return [category_slug] + descendant_slugs(category_slug, category_nodes())
