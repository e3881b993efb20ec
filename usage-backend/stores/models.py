# usage-backend/stores/models.py
from django.db import models
from common.models import TimeStampedModel


class Store(TimeStampedModel):
    """
    A retail location, identified by the number printed on its usage reports
    (e.g. "Store 1020").
    """
    number = models.CharField(max_length=20, unique=True)

    class Meta:
        ordering = ["number", "id"]

    def __str__(self):
        return f"Store {self.number}"
