# shared/common/mixins.py
"""
Reusable Model Mixins
"""

import uuid
from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Mixin that provides UUID as primary key instead of auto-increment integer.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )

    class Meta:
        abstract = True


class TimestampMixin(models.Model):
    """
    Mixin that provides created_at and updated_at timestamp fields.
    """

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
