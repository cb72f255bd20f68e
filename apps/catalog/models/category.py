from django.db import models


class Category(models.Model):
    """
    Hierarchical product categories.
    Examples: Flooring > Vinyl > Click vinyl
    """
    name = models.CharField(
        max_length=200,
        verbose_name='Name'
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )
    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children',
        verbose_name='Parent category'
    )
    image = models.CharField(
        max_length=500,
        blank=True,
        verbose_name='Image',
        help_text='Storage path of the category image'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )
    display_order = models.PositiveIntegerField(
        default=0,
        verbose_name='Display order'
    )

    class Meta:
        ordering = ['display_order', 'name']
        verbose_name = 'Category'
        verbose_name_plural = 'Categories'

    def __str__(self):
        return self.full_path

    @property
    def full_path(self):
        """Returns the full category path: Parent > Child > Grandchild"""
        ancestors = self.get_ancestors()
        path = [a.name for a in ancestors] + [self.name]
        return ' > '.join(path)

    def get_ancestors(self):
        """Returns list of all ancestor categories, from root to immediate parent."""
        ancestors = []
        seen = {self.pk}
        current = self.parent
        while current and current.pk not in seen:
            ancestors.insert(0, current)
            seen.add(current.pk)
            current = current.parent
        return ancestors

    def get_descendants(self):
        """Returns all descendant categories (children, grandchildren, etc.)"""
        descendants = []
        for child in self.children.all():
            descendants.append(child)
            descendants.extend(child.get_descendants())
        return descendants

    @property
    def level(self):
        """Returns the depth level (0 for root categories)."""
        return len(self.get_ancestors())

    def save(self, *args, **kwargs):
        if not self.slug:
            from apps.catalog.services.slugs import generate_slug, unique_slug
            self.slug = unique_slug(Category, generate_slug(self.name), exclude_pk=self.pk)
        super().save(*args, **kwargs)
