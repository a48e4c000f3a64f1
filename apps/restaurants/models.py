# ==========================================
# apps/restaurants/models.py
# ==========================================

from django.db import models
from django.db.models import Q
from django.core.validators import MinValueValidator, MaxValueValidator
from decimal import Decimal
import uuid


class Restaurant(models.Model):
    """Partner restaurant issuing its own loyalty points."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True)

    # Geo-coordinate (both set or both empty)
    latitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('-90')), MaxValueValidator(Decimal('90'))]
    )
    longitude = models.DecimalField(
        max_digits=9,
        decimal_places=6,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('-180')), MaxValueValidator(Decimal('180'))]
    )

    # Reference into the external blob storage
    image_url = models.URLField(max_length=500, blank=True)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'restaurants'
        indexes = [
            models.Index(fields=['is_active', 'name'], name='restaurants_active_name_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(latitude__isnull=True, longitude__isnull=True)
                    | Q(latitude__isnull=False, longitude__isnull=False)
                ),
                name='restaurants_coordinate_complete',
            ),
        ]
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def has_coordinate(self):
        return self.latitude is not None and self.longitude is not None

    @property
    def coordinate(self):
        """(latitude, longitude) as floats, or None when unknown."""
        if not self.has_coordinate:
            return None
        return float(self.latitude), float(self.longitude)
