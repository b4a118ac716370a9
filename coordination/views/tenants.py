"""
Registration and approval flow shared by clinics and hospitals.

A principal registers (or resubmits) its own tenant; platform admins
approve or reject it.  Every change is announced to the admin room and
status changes also to the tenant's own room, which its owner may join
while still pending.
"""
from __future__ import annotations

import logging

from rest_framework import status

from coordination.exceptions import Forbidden, NotFound
from coordination.realtime.broadcast import publish, to_admin, to_tenant
from coordination.serializers.tenants import TENANT_SERIALIZERS, TenantListQuerySerializer
from coordination.services import hospitals as hospital_service
from coordination.services.tenants import (
    ACTION_APPROVE, ACTION_REJECT, KIND_HOSPITAL, TENANT_MODELS, change_status, register_tenant, resolve_tenant,
)
from .common import data_response, list_response, require_admin

logger = logging.getLogger(__name__)

ACTION_EVENTS = {ACTION_APPROVE: 'approved', ACTION_REJECT: 'rejected'}


def register(request, kind):
    in_serializer, out_serializer = TENANT_SERIALIZERS[kind]
    s = in_serializer(data=request.data)
    s.is_valid(raise_exception=True)
    tenant, created = register_tenant(request.user, kind, s.validated_data)
    if kind == KIND_HOSPITAL:
        hospital_service.invalidate_stats()
    data = out_serializer(tenant).data
    publish(to_admin(), f'{kind}:registered', {kind: data, 'created': created})
    return data_response(data, status=status.HTTP_201_CREATED)


def own_tenant(request, kind):
    tenant = resolve_tenant(request.user.id, kind)
    if tenant is None:
        raise NotFound(f'{kind.capitalize()} not found for this user')
    return data_response(TENANT_SERIALIZERS[kind][1](tenant).data)


def admin_list(request, kind, *, status=None):
    require_admin(request)
    q = TenantListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = TENANT_MODELS[kind].objects.all()
    status = status or q.validated_data.get('status')
    if status:
        qs = qs.filter(status=status)
    return list_response(TENANT_SERIALIZERS[kind][1](qs.order_by('-created_at'), many=True).data)


def detail(request, kind, tenant_id):
    tenant = TENANT_MODELS[kind].objects.filter(id=tenant_id).first()
    if tenant is None:
        raise NotFound(f'{kind.capitalize()} not found')
    if not request.user.is_admin and tenant.owner_id != request.user.id:
        raise Forbidden(f'Not allowed to view this {kind}')
    return data_response(TENANT_SERIALIZERS[kind][1](tenant).data)


def set_status(request, kind, tenant_id, action):
    # callers are gated by IsPlatformAdmin before anything is read
    tenant = change_status(request.user, kind, tenant_id, action)
    if kind == KIND_HOSPITAL:
        hospital_service.invalidate_stats()
    event = f'{kind}:{ACTION_EVENTS[action]}'
    payload = {f'{kind}Id': tenant.id, 'status': tenant.status}
    publish(to_tenant(kind, tenant.id), event, payload)
    publish(to_admin(), event, payload)
    return data_response(TENANT_SERIALIZERS[kind][1](tenant).data)
