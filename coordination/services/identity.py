"""
Identity verification against the external auth service.

A bearer credential is exchanged for a :class:`Principal` on every
request; nothing is cached so a revoked session stops working on the
next call.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import requests
from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from coordination.exceptions import Unauthenticated, UpstreamFailure

logger = logging.getLogger(__name__)

ROLE_ADMIN = 'admin'
ROLE_USER = 'user'


@dataclass(frozen=True)
class Principal:
    """An authenticated user as reported by the auth service."""
    id: str
    email: str
    role: str = ROLE_USER

    # DRF treats request.user as authenticated through this flag
    is_authenticated = True

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


class SupabaseIdentityVerifier:
    """Verifies access tokens with ``GET /auth/v1/user`` of the BaaS."""

    def __init__(self, base_url: str, api_key: str, *, timeout: int = 5,
                 admin_emails: Iterable[str] = (), session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.admin_emails = frozenset(e.lower() for e in admin_emails)
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> 'SupabaseIdentityVerifier':
        return cls(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            timeout=settings.AUTH_VERIFY_TIMEOUT,
            admin_emails=settings.PLATFORM_ADMIN_EMAILS,
        )

    def verify(self, credential: Optional[str]) -> Principal:
        token = (credential or '').strip()
        if not token or any(ch.isspace() for ch in token):
            raise Unauthenticated('No token provided')
        if not self.base_url:
            raise UpstreamFailure('Auth service is not configured')

        try:
            r = self.session.get(
                f'{self.base_url}/auth/v1/user',
                headers={'Authorization': f'Bearer {token}', 'apikey': self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning('identity.verify_unreachable error=%s', e)
            raise UpstreamFailure(f'Auth service unreachable: {e}') from e

        if r.status_code in (401, 403):
            logger.info('identity.verify_rejected status=%s', r.status_code)
            raise Unauthenticated('Invalid or expired token')
        if r.status_code != 200:
            raise UpstreamFailure(f'Auth service error {r.status_code}')

        try:
            data = r.json()
        except ValueError as e:
            logger.warning('identity.verify_bad_body error=%s', e)
            raise UpstreamFailure('Auth service returned an unreadable body') from e
        if not isinstance(data, dict):
            raise UpstreamFailure('Auth service returned an unreadable body')
        user_id = data.get('id')
        if not user_id:
            raise Unauthenticated('Invalid or expired token')
        return self.principal_from_user(data)

    def principal_from_user(self, data: dict) -> Principal:
        email = (data.get('email') or '').lower()
        role = (data.get('app_metadata') or {}).get('role') or ROLE_USER
        if email and email in self.admin_emails:
            role = ROLE_ADMIN
        return Principal(id=str(data['id']), email=email, role=role)


def build_identity_verifier():
    """Construct the configured verifier; called once at process start."""
    try:
        verifier_cls = import_string(settings.IDENTITY_VERIFIER)
    except ImportError as e:
        raise ImproperlyConfigured(f'IDENTITY_VERIFIER cannot be imported: {e}') from e
    return verifier_cls.from_settings()


def get_identity_verifier():
    return apps.get_app_config('coordination').identity_verifier
