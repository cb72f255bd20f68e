from django.db import models


class Country(models.Model):
    """
    Country of origin shown next to brands.
    Flag images live in storage under the country-flags folder.
    """
    name = models.CharField(
        max_length=100,
        verbose_name='Name'
    )
    code = models.CharField(
        max_length=2,
        unique=True,
        verbose_name='ISO code'
    )
    flag_image = models.CharField(
        max_length=500,
        blank=True,
        verbose_name='Flag image',
        help_text='Storage path of the flag image'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )

    class Meta:
        ordering = ['name']
        verbose_name = 'Country'
        verbose_name_plural = 'Countries'

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        self.code = (self.code or '').upper()
        super().save(*args, **kwargs)


class StoreLocation(models.Model):
    """Physical shop where products can be seen or picked up."""
    address = models.CharField(
        max_length=255,
        verbose_name='Address'
    )
    description = models.TextField(
        blank=True,
        verbose_name='Description'
    )
    opening_hours = models.TextField(
        blank=True,
        verbose_name='Opening hours'
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name='Active'
    )

    class Meta:
        ordering = ['id']
        verbose_name = 'Store location'
        verbose_name_plural = 'Store locations'

    def __str__(self):
        return self.address
