"""
Access gate: permission classes layered on top of bearer authentication.

``IsAuthenticated`` (DRF) covers the authenticated-only check.  The
tenant gates additionally resolve the caller's clinic or hospital and
attach a :class:`RequestContext` as ``request.tenant_context``; the
resource handlers read the tenant id from there and nowhere else.
"""
import logging

from rest_framework.permissions import BasePermission

from coordination.exceptions import NoTenant, TenantNotActive
from coordination.services.tenants import KIND_CLINIC, KIND_HOSPITAL, RequestContext, resolve_tenant

logger = logging.getLogger(__name__)


def _principal(request):
    user = getattr(request, "user", None)
    return user if user is not None and getattr(user, "is_authenticated", False) else None


class TenantActive(BasePermission):
    """Require an owned tenant of ``tenant_kind`` in status ``active``."""
    tenant_kind = None

    def has_permission(self, request, view) -> bool:
        principal = _principal(request)
        if principal is None:
            # DRF turns this into a 401 because no authenticator succeeded
            return False
        tenant = resolve_tenant(principal.id, self.tenant_kind)
        if tenant is None:
            logger.info("gate.no_tenant kind=%s principal=%s", self.tenant_kind, principal.id)
            raise NoTenant(f"No {self.tenant_kind} associated with this account")
        if not tenant.is_active:
            logger.info("gate.not_active kind=%s id=%s status=%s", self.tenant_kind, tenant.id, tenant.status)
            raise TenantNotActive(f"{self.tenant_kind.capitalize()} setup is {tenant.status}")
        request.tenant_context = RequestContext(
            principal=principal,
            tenant_kind=self.tenant_kind,
            tenant_id=tenant.id,
            tenant_status=tenant.status,
        )
        return True


class HasActiveClinic(TenantActive):
    tenant_kind = KIND_CLINIC


class HasActiveHospital(TenantActive):
    tenant_kind = KIND_HOSPITAL


class IsPlatformAdmin(BasePermission):
    """Only principals carrying the admin role."""
    message = "Admin access required"
    code = "forbidden"

    def has_permission(self, request, view) -> bool:
        principal = _principal(request)
        return bool(principal and principal.is_admin)
