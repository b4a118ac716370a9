"""
WebSocket handshake and room membership.

The consumer runs inside ``async_to_sync`` so that its database lookups
execute on the test thread and see the test transaction.
"""
import pytest
from asgiref.sync import async_to_sync, sync_to_async
from channels.layers import get_channel_layer
from channels.routing import URLRouter
from channels.testing import WebsocketCommunicator
from django.apps import apps

from coordination.models import TenantStatus
from coordination.realtime import broadcast
from coordination.realtime.routing import websocket_urlpatterns
from coordination.services.identity import ROLE_ADMIN, Principal, SupabaseIdentityVerifier

pytestmark = pytest.mark.django_db

application = URLRouter(websocket_urlpatterns)


@pytest.fixture(autouse=True)
def fresh_layer(settings):
    settings.CHANNEL_LAYERS = {'default': {'BACKEND': 'channels.layers.InMemoryChannelLayer'}}


@pytest.fixture
def tokens(verifier):
    def _add(uid, role='user'):
        verifier.tokens[f'ws-{uid}'] = Principal(id=uid, email=f'{uid}@example.org', role=role)
        return f'ws-{uid}'
    return _add


def _socket(token=None):
    path = '/ws/events/' + (f'?token={token}' if token else '')
    return WebsocketCommunicator(application, path)


def test_handshake_without_token_is_refused(verifier):
    async def scenario():
        connected, code = await _socket().connect()
        return connected, code
    assert async_to_sync(scenario)() == (False, 4001)


def test_handshake_with_unknown_token_is_refused(verifier):
    async def scenario():
        connected, code = await _socket('nope').connect()
        return connected, code
    assert async_to_sync(scenario)() == (False, 4001)


def test_welcome_frame_advertises_polling_fallback(tokens, settings):
    settings.REALTIME_POLL_INTERVAL_SECONDS = 20
    token = tokens('u-ws')

    async def scenario():
        comm = _socket(token)
        connected, _ = await comm.connect()
        assert connected
        welcome = await comm.receive_json_from()
        await comm.disconnect()
        return welcome
    welcome = async_to_sync(scenario)()
    assert welcome['type'] == 'welcome'
    assert welcome['pollInterval'] == 20
    assert welcome['principal'] == {'id': 'u-ws', 'role': 'user'}


def test_pending_clinic_joins_own_room_and_receives_events(tokens, make_clinic):
    token = tokens('u-pend')
    clinic = make_clinic('u-pend', status=TenantStatus.PENDING_APPROVAL)

    async def scenario():
        comm = _socket(token)
        await comm.connect()
        await comm.receive_json_from()
        await comm.send_json_to({'type': 'join:clinic'})
        joined = await comm.receive_json_from()
        await get_channel_layer().group_send(
            f'clinic.{clinic.id}',
            {'type': 'relay.event', 'event': 'clinic:approved', 'data': {'clinicId': clinic.id, 'status': 'active'}},
        )
        event = await comm.receive_json_from()
        await comm.disconnect()
        return joined, event
    joined, event = async_to_sync(scenario)()
    assert joined == {'type': 'joined', 'room': f'clinic.{clinic.id}'}
    assert event == {'event': 'clinic:approved', 'data': {'clinicId': clinic.id, 'status': 'active'}}


def test_joining_another_clinics_room_is_refused(tokens, make_clinic):
    token = tokens('u-own')
    make_clinic('u-own')
    other = make_clinic('u-victim')

    async def scenario():
        comm = _socket(token)
        await comm.connect()
        await comm.receive_json_from()
        await comm.send_json_to({'type': 'join:clinic', 'id': other.id})
        error = await comm.receive_json_from()
        await get_channel_layer().group_send(
            f'clinic.{other.id}', {'type': 'relay.event', 'event': 'patient:created', 'data': {}},
        )
        silent = await comm.receive_nothing()
        await comm.disconnect()
        return error, silent
    error, silent = async_to_sync(scenario)()
    assert error['type'] == 'error' and error['code'] == 4003
    assert silent is True


def test_join_without_tenant_and_admin_room(tokens):
    user = tokens('u-plain')
    admin = tokens('u-admin', role=ROLE_ADMIN)

    async def scenario():
        comm = _socket(user)
        await comm.connect()
        await comm.receive_json_from()
        await comm.send_json_to({'type': 'join:hospital'})
        no_tenant = await comm.receive_json_from()
        await comm.send_json_to({'type': 'join:admin'})
        refused = await comm.receive_json_from()
        await comm.disconnect()

        comm = _socket(admin)
        await comm.connect()
        await comm.receive_json_from()
        await comm.send_json_to({'type': 'join:admin'})
        joined = await comm.receive_json_from()
        await comm.disconnect()
        return no_tenant, refused, joined
    no_tenant, refused, joined = async_to_sync(scenario)()
    assert no_tenant['code'] == 4004
    assert refused['code'] == 4003
    assert joined == {'type': 'joined', 'room': 'admin'}


def test_publish_reaches_every_socket_through_broadcast_room(tokens, monkeypatch):
    monkeypatch.setattr(broadcast, 'get_channel_layer', get_channel_layer)
    token = tokens('u-all')

    async def scenario():
        comm = _socket(token)
        await comm.connect()
        await comm.receive_json_from()
        sent = await sync_to_async(broadcast.publish)(broadcast.to_all(), 'system:notice', {'msg': 'maintenance'})
        event = await comm.receive_json_from()
        await comm.disconnect()
        return sent, event
    sent, event = async_to_sync(scenario)()
    assert sent is True
    assert event == {'event': 'system:notice', 'data': {'msg': 'maintenance'}}


class _HtmlResponse:
    status_code = 200

    def json(self):
        raise ValueError('Expecting value')


class _HtmlSession:
    def get(self, url, headers=None, timeout=None):
        return _HtmlResponse()


def test_handshake_with_unreadable_auth_reply_is_refused(monkeypatch):
    verifier = SupabaseIdentityVerifier('https://auth.example.org', 'anon-key', session=_HtmlSession())
    monkeypatch.setattr(apps.get_app_config('coordination'), 'identity_verifier', verifier)

    async def scenario():
        connected, code = await _socket('tok').connect()
        return connected, code
    assert async_to_sync(scenario)() == (False, 4001)
