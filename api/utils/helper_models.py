"""Abstract model helpers shared by the api models."""

from django.db import models


class TimeStampedModel(models.Model):
    """Adds created_at/updated_at bookkeeping columns."""

    created_at = models.DateTimeField(auto_now_add=True, help_text="Date and time when this record was created.")
    updated_at = models.DateTimeField(auto_now=True, help_text="Date and time when this record was last updated.")

    class Meta:
        abstract = True
