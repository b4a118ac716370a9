import json
import logging
from urllib.parse import parse_qs

from asgiref.sync import sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from rest_framework.exceptions import APIException

from coordination.realtime.broadcast import ADMIN_GROUP, BROADCAST_GROUP, tenant_group
from coordination.services.identity import get_identity_verifier
from coordination.services.tenants import KIND_CLINIC, KIND_HOSPITAL, resolve_tenant

logger = logging.getLogger(__name__)

CLOSE_UNAUTHENTICATED = 4001
ERROR_FORBIDDEN = 4003
ERROR_NO_TENANT = 4004
ERROR_BAD_MESSAGE = 4400

JOIN_KINDS = {"join:clinic": KIND_CLINIC, "join:hospital": KIND_HOSPITAL}


async def _ws_error(ws, code: int, message: str, *, close: bool = False):
    """
    Uniform error frame.  Codes 4xxx are client errors.
    """
    payload = {"type": "error", "code": code, "message": message}
    try:
        await ws.send(json.dumps(payload))
    finally:
        if close:
            await ws.close(code=code)


def _credential(scope) -> str:
    query = parse_qs((scope.get("query_string") or b"").decode("latin-1"))
    token = (query.get("token") or [""])[0]
    if token:
        return token
    for name, value in scope.get("headers") or []:
        if name == b"authorization":
            parts = value.decode("latin-1").split()
            if len(parts) == 2 and parts[0].lower() == "bearer":
                return parts[1]
    return ""


class EventsConsumer(AsyncWebsocketConsumer):
    """
    Push channel for portal events.

    The bearer credential is verified during the handshake; rooms are then
    derived from the verified principal, never from ids the client sends.
    """

    async def connect(self):
        self.rooms = set()
        self.principal = None
        try:
            self.principal = await sync_to_async(get_identity_verifier().verify)(_credential(self.scope))
        except APIException as exc:
            logger.info("ws.rejected reason=%s", exc.detail)
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        await self.accept()
        await self._join(BROADCAST_GROUP)
        await self.send(json.dumps({
            "type": "welcome",
            "principal": {"id": self.principal.id, "role": self.principal.role},
            "pollInterval": settings.REALTIME_POLL_INTERVAL_SECONDS,
        }))

    async def disconnect(self, close_code):
        for group in getattr(self, "rooms", ()):
            await self.channel_layer.group_discard(group, self.channel_name)
        self.rooms = set()

    async def receive(self, text_data=None, bytes_data=None):
        if not text_data:
            return
        try:
            message = json.loads(text_data)
        except ValueError:
            await _ws_error(self, ERROR_BAD_MESSAGE, "invalid json")
            return
        if not isinstance(message, dict):
            await _ws_error(self, ERROR_BAD_MESSAGE, "invalid message")
            return

        kind = message.get("type")
        if kind == "join:admin":
            await self._join_admin()
        elif kind in JOIN_KINDS:
            await self._join_tenant(JOIN_KINDS[kind], message.get("id"))
        elif kind == "ping":
            await self.send(json.dumps({"type": "pong"}))
        else:
            await _ws_error(self, ERROR_BAD_MESSAGE, f"unsupported message type {kind!r}")

    async def _join(self, group: str):
        await self.channel_layer.group_add(group, self.channel_name)
        self.rooms.add(group)

    async def _join_admin(self):
        if not self.principal.is_admin:
            logger.info("ws.join_refused room=admin principal=%s", self.principal.id)
            await _ws_error(self, ERROR_FORBIDDEN, "admin room requires the admin role")
            return
        await self._join(ADMIN_GROUP)
        await self.send(json.dumps({"type": "joined", "room": ADMIN_GROUP}))

    async def _join_tenant(self, kind: str, requested_id=None):
        # Own tenant in any status, so pending tenants still hear about their approval.
        tenant = await sync_to_async(resolve_tenant)(self.principal.id, kind)
        if tenant is None:
            await _ws_error(self, ERROR_NO_TENANT, f"no {kind} associated with this account")
            return
        if requested_id not in (None, "") and str(requested_id) != str(tenant.id):
            logger.warning("ws.join_refused kind=%s requested=%s own=%s principal=%s",
                           kind, requested_id, tenant.id, self.principal.id)
            await _ws_error(self, ERROR_FORBIDDEN, f"cannot join another {kind}'s room")
            return
        group = tenant_group(kind, tenant.id)
        await self._join(group)
        await self.send(json.dumps({"type": "joined", "room": group}))

    async def relay_event(self, event):
        # event: {"type": "relay.event", "event": "<name>", "data": {...}}
        await self.send(json.dumps({"event": event["event"], "data": event.get("data") or {}}))
