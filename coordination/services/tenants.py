"""
Tenant resolution, registration and the approval state machine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from django.db import IntegrityError, transaction

from coordination.exceptions import InvalidTransition, NotFound
from coordination.models import Clinic, Hospital, TenantStatus
from coordination.services.audit import log_action
from coordination.services.identity import Principal

logger = logging.getLogger(__name__)

KIND_CLINIC = 'clinic'
KIND_HOSPITAL = 'hospital'
TENANT_MODELS = {KIND_CLINIC: Clinic, KIND_HOSPITAL: Hospital}

Tenant = Union[Clinic, Hospital]

ACTION_APPROVE = 'approve'
ACTION_REJECT = 'reject'
ACTION_RESUBMIT = 'resubmit'

# action -> (allowed source statuses, target status)
TRANSITIONS = {
    ACTION_APPROVE: ({TenantStatus.PENDING_APPROVAL}, TenantStatus.ACTIVE),
    ACTION_REJECT: ({TenantStatus.PENDING_APPROVAL, TenantStatus.ACTIVE}, TenantStatus.SUSPENDED),
    ACTION_RESUBMIT: (set(TenantStatus.values), TenantStatus.PENDING_APPROVAL),
}


@dataclass(frozen=True)
class RequestContext:
    """Per-request authorization result handed to resource handlers."""
    principal: Principal
    tenant_kind: str
    tenant_id: int
    tenant_status: str


def resolve_tenant(principal_id: str, kind: str) -> Optional[Tenant]:
    """Return the tenant of ``kind`` owned by the principal, or None if unregistered."""
    model = TENANT_MODELS[kind]
    return model.objects.filter(owner_id=principal_id).first()


def next_status(current: str, action: str) -> str:
    sources, target = TRANSITIONS[action]
    if current not in sources:
        raise InvalidTransition(f'Cannot {action} a tenant in status {current}')
    return target


@transaction.atomic
def register_tenant(principal: Principal, kind: str, fields: dict) -> tuple[Tenant, bool]:
    """Create or resubmit the principal's tenant; always lands in pending_approval.

    Upsert keyed on the owner id: a second registration updates the same
    row.  Returns ``(tenant, created)``.
    """
    model = TENANT_MODELS[kind]
    tenant = model.objects.select_for_update().filter(owner_id=principal.id).first()
    created = tenant is None
    if created:
        try:
            with transaction.atomic():
                tenant = model.objects.create(
                    owner_id=principal.id,
                    owner_email=principal.email,
                    status=TenantStatus.PENDING_APPROVAL,
                    **fields,
                )
        except IntegrityError:
            # A concurrent registration for the same owner won the insert.
            tenant = model.objects.select_for_update().get(owner_id=principal.id)
            created = False

    if not created:
        tenant.status = next_status(tenant.status, ACTION_RESUBMIT)
        tenant.owner_email = principal.email
        for key, value in fields.items():
            setattr(tenant, key, value)
        tenant.save()

    log_action(actor=principal, action=f'{kind}_register', object_type=kind, object_id=tenant.id,
               detail={'created': created})
    logger.info('tenant.registered kind=%s id=%s owner=%s created=%s', kind, tenant.id, principal.id, created)
    return tenant, created


@transaction.atomic
def change_status(actor: Principal, kind: str, tenant_id: int, action: str) -> Tenant:
    """Apply an admin approve/reject action; the caller has already checked the role."""
    model = TENANT_MODELS[kind]
    tenant = model.objects.select_for_update().filter(id=tenant_id).first()
    if tenant is None:
        raise NotFound(f'{kind.capitalize()} not found')
    previous = tenant.status
    tenant.status = next_status(previous, action)
    tenant.save(update_fields=['status', 'updated_at'])

    log_action(actor=actor, action=f'{kind}_{action}', object_type=kind, object_id=tenant.id,
               detail={'from': previous, 'to': tenant.status})
    logger.info('tenant.status kind=%s id=%s %s->%s by=%s', kind, tenant.id, previous, tenant.status, actor.email)
    return tenant
