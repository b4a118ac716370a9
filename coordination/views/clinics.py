"""
Clinic registration and admin approval endpoints.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import IsPlatformAdmin
from ..services.tenants import ACTION_APPROVE, ACTION_REJECT, KIND_CLINIC
from . import tenants


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def clinics(request):
    """``GET`` lists clinics (admin, optional ``?status=``); ``POST`` registers the caller's clinic.

    Registration is an upsert on the caller's id: submitting again updates
    the same clinic and puts it back into ``pending_approval``.
    """
    if request.method == 'GET':
        return tenants.admin_list(request, KIND_CLINIC)
    return tenants.register(request, KIND_CLINIC)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_clinic(request):
    return tenants.own_tenant(request, KIND_CLINIC)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def clinic_detail(request, clinic_id: int):
    return tenants.detail(request, KIND_CLINIC, clinic_id)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def approve_clinic(request, clinic_id: int):
    return tenants.set_status(request, KIND_CLINIC, clinic_id, ACTION_APPROVE)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def reject_clinic(request, clinic_id: int):
    return tenants.set_status(request, KIND_CLINIC, clinic_id, ACTION_REJECT)
