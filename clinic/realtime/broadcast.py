"""
Fan-out of "data changed" events to connected dashboards.

Views call :func:`broadcast_refresh` after a successful mutation with the
names of the screens that should refetch (``"ot"``, ``"tokens"``,
``"alerts"``...).  Delivery is best-effort: a missing or failing channel
layer never fails the request that triggered it.
"""
from __future__ import annotations

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from .consumers import UpdatesConsumer

logger = logging.getLogger(__name__)


def broadcast_refresh(*keys: str) -> bool:
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return False
    now = timezone.now()
    event = {
        "type": "broadcast.refresh",
        "version": int(now.timestamp()),
        "ts": now.isoformat(),
        "keys": list(keys)[:50],
    }
    try:
        async_to_sync(channel_layer.group_send)(UpdatesConsumer.GROUP, event)
    except Exception:
        logger.warning("refresh broadcast failed for %s", keys, exc_info=True)
        return False
    return True
