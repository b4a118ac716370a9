import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from coordination.exceptions import Unauthenticated
from coordination.models import Clinic, Hospital, Patient, TenantStatus
from coordination.realtime import broadcast
from coordination.services.identity import ROLE_ADMIN, ROLE_USER, Principal


class FakeVerifier:
    """Token -> principal table standing in for the auth service."""

    def __init__(self):
        self.tokens = {}

    def verify(self, credential):
        token = (credential or '').strip()
        if not token:
            raise Unauthenticated('No token provided')
        principal = self.tokens.get(token)
        if principal is None:
            raise Unauthenticated('Invalid or expired token')
        return principal


class RecordingLayer:
    def __init__(self):
        self.sent = []

    async def group_send(self, group, message):
        self.sent.append((group, message))


class Events:
    def __init__(self, layer):
        self.layer = layer

    def names(self, group=None):
        return [m['event'] for g, m in self.layer.sent if group is None or g == group]

    def payloads(self, event):
        return [(g, m['data']) for g, m in self.layer.sent if m['event'] == event]


@pytest.fixture
def verifier(monkeypatch):
    fake = FakeVerifier()
    monkeypatch.setattr(apps.get_app_config('coordination'), 'identity_verifier', fake)
    return fake


@pytest.fixture(autouse=True)
def events(monkeypatch):
    layer = RecordingLayer()
    monkeypatch.setattr(broadcast, 'get_channel_layer', lambda: layer)
    return Events(layer)


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def login(verifier):
    """Return an APIClient carrying a bearer token for a new principal."""
    def _login(uid, *, email=None, role=ROLE_USER):
        principal = Principal(id=uid, email=email or f'{uid}@example.org', role=role)
        token = f'token-{uid}'
        verifier.tokens[token] = principal
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
        client.principal = principal
        client.token = token
        return client
    return _login


@pytest.fixture
def admin_client(login):
    return login('admin-1', email='ops@example.org', role=ROLE_ADMIN)


@pytest.fixture
def make_clinic(db):
    def _make(owner_id, *, status=TenantStatus.ACTIVE, name=None, region='Andaman'):
        return Clinic.objects.create(owner_id=owner_id, owner_email=f'{owner_id}@example.org',
                                     name=name or f'Clinic {owner_id}', status=status, region=region)
    return _make


@pytest.fixture
def make_hospital(db):
    def _make(owner_id, *, status=TenantStatus.ACTIVE, name=None, region='Chennai'):
        return Hospital.objects.create(owner_id=owner_id, owner_email=f'{owner_id}@example.org',
                                       name=name or f'Hospital {owner_id}', status=status, region=region)
    return _make


@pytest.fixture
def make_patient(db):
    counter = {'n': 0}

    def _make(clinic, **fields):
        counter['n'] += 1
        fields.setdefault('name', f'Patient {counter["n"]}')
        return Patient.objects.create(clinic=clinic, patient_code=f'PAT-2026-T{counter["n"]:04d}', **fields)
    return _make


@pytest.fixture
def clinic_a(login, make_clinic):
    client = login('owner-a')
    return client, make_clinic('owner-a')


@pytest.fixture
def clinic_b(login, make_clinic):
    client = login('owner-b')
    return client, make_clinic('owner-b')
