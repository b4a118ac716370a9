"""
Bearer token authentication backed by the external auth service.

The class only parses the ``Authorization`` header and delegates the
actual verification to the process-wide identity verifier, so the same
code path serves HTTP requests and WebSocket handshakes.
"""
from __future__ import annotations

import logging

from rest_framework import authentication

from coordination.exceptions import Unauthenticated
from coordination.services.identity import get_identity_verifier

logger = logging.getLogger(__name__)


class BearerTokenAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header:
            return None
        if header[0].decode('latin-1').lower() != self.keyword.lower():
            raise Unauthenticated('No token provided')
        if len(header) != 2:
            raise Unauthenticated('Invalid authorization header')
        try:
            token = header[1].decode()
        except UnicodeError:
            raise Unauthenticated('Invalid authorization header')

        principal = get_identity_verifier().verify(token)
        return principal, token

    def authenticate_header(self, request):
        # Keeps DRF answering 401 (not 403) for missing credentials
        return f'{self.keyword} realm="api"'
