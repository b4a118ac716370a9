"""
Error taxonomy and the unified API exception handler.

Every failure leaves the API as ``{"error": <message>, "code": <code>}``
so the portals can tell "must register" (``no_tenant``) from "must
wait" (``tenant_not_active``) without parsing messages.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class Unauthenticated(exceptions.AuthenticationFailed):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication required'
    default_code = 'unauthenticated'


class NoTenant(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'No tenant associated with this account'
    default_code = 'no_tenant'


class TenantNotActive(exceptions.APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'Tenant setup is pending approval'
    default_code = 'tenant_not_active'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'Forbidden'
    default_code = 'forbidden'


class NotFound(exceptions.NotFound):
    default_code = 'not_found'


class InvalidTransition(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Status transition not permitted'
    default_code = 'invalid_transition'


class UpstreamFailure(exceptions.APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'Upstream service failure'
    default_code = 'upstream_failure'


# DRF's built-in exceptions mapped onto the taxonomy codes
_CODE_ALIASES = {
    'not_authenticated': 'unauthenticated',
    'authentication_failed': 'unauthenticated',
    'permission_denied': 'forbidden',
}


def _error_code(exc) -> str:
    codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
    code = codes if isinstance(codes, str) else getattr(exc, 'default_code', 'error')
    return _CODE_ALIASES.get(code, code)


def api_exception_handler(exc, context):
    # Deferred: rest_framework.views loads the authentication classes, which import this module.
    from rest_framework.views import exception_handler as drf_exception_handler

    resp = drf_exception_handler(exc, context)
    if resp is None:
        # Store/driver errors: surfaced with their message, never retried.
        logger.exception('request.unhandled error=%s', exc)
        return Response(
            {'error': str(exc), 'code': UpstreamFailure.default_code},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    if isinstance(exc, exceptions.ValidationError):
        resp.data = {'error': 'Invalid request', 'code': 'invalid', 'details': resp.data}
        return resp
    detail = resp.data.get('detail') if isinstance(resp.data, dict) else resp.data
    resp.data = {'error': str(detail), 'code': _error_code(exc)}
    return resp
