"""
Best-effort event publishing over the channel layer.

Rooms are channel-layer groups: ``clinic.<id>``, ``hospital.<id>``,
``admin`` and ``broadcast`` (every socket).  Delivery is at-most-once
and publishing never fails the caller: the database write that produced
the event has already committed, so errors are logged and dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

logger = logging.getLogger(__name__)

ADMIN_GROUP = "admin"
BROADCAST_GROUP = "broadcast"
RELAY_TYPE = "relay.event"


@dataclass(frozen=True)
class Scope:
    group: str


def tenant_group(kind: str, tenant_id) -> str:
    return f"{kind}.{tenant_id}"


def to_tenant(kind: str, tenant_id) -> Scope:
    return Scope(tenant_group(kind, tenant_id))


def to_admin() -> Scope:
    return Scope(ADMIN_GROUP)


def to_all() -> Scope:
    return Scope(BROADCAST_GROUP)


def publish(scope: Scope, event: str, payload: Optional[Dict[str, Any]] = None) -> bool:
    """Send ``event`` to every socket in ``scope``; returns False when it was dropped."""
    try:
        channel_layer = get_channel_layer()
        if channel_layer is None:
            logger.warning("broadcast.no_layer event=%s group=%s", event, scope.group)
            return False
        async_to_sync(channel_layer.group_send)(
            scope.group,
            {"type": RELAY_TYPE, "event": event, "data": payload or {}},
        )
    except Exception:
        logger.exception("broadcast.failed event=%s group=%s", event, scope.group)
        return False
    logger.debug("broadcast.sent event=%s group=%s", event, scope.group)
    return True
