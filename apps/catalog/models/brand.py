from django.db import models


class Brand(models.Model):
    """Manufacturer of products. Logos live in storage under brands/."""
    name = models.CharField(
        max_length=200,
        verbose_name='Name'
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )
    image = models.CharField(
        max_length=500,
        blank=True,
        verbose_name='Logo',
        help_text='Storage path of the brand logo'
    )
    country = models.ForeignKey(
        'catalog.Country',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='brands',
        verbose_name='Country'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )

    class Meta:
        ordering = ['name']
        verbose_name = 'Brand'
        verbose_name_plural = 'Brands'

    def __str__(self):
        return self.name


class Collection(models.Model):
    """A named product line inside a brand."""
    name = models.CharField(
        max_length=200,
        verbose_name='Name'
    )
    slug = models.SlugField(
        max_length=200,
        unique=True,
        verbose_name='Slug'
    )
    brand = models.ForeignKey(
        Brand,
        on_delete=models.CASCADE,
        related_name='collections',
        verbose_name='Brand'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )

    class Meta:
        ordering = ['name']
        verbose_name = 'Collection'
        verbose_name_plural = 'Collections'

    def __str__(self):
        return f"{self.brand.name} / {self.name}"
