from datetime import datetime

from django.utils import timezone


def at(hour, minute=0, day=15):
    """Aware datetime on 2024-01-<day> in the project time zone."""
    return timezone.make_aware(datetime(2024, 1, day, hour, minute))
