"""
Hospital registration, approval and directory endpoints.

The directory endpoints (active, by region, region mapping, stats) are
open to any authenticated principal; clinics use them to pick a
receiving hospital.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..models import RegionMapping, TenantStatus
from ..permissions import IsPlatformAdmin
from ..serializers.tenants import HospitalSummarySerializer, RegionMappingSerializer
from ..services import hospitals as hospital_service
from ..services.tenants import ACTION_APPROVE, ACTION_REJECT, KIND_HOSPITAL
from . import tenants
from .common import data_response, list_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def hospitals(request):
    if request.method == 'GET':
        return tenants.admin_list(request, KIND_HOSPITAL)
    return tenants.register(request, KIND_HOSPITAL)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_hospital(request):
    return tenants.own_tenant(request, KIND_HOSPITAL)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def pending_hospitals(request):
    return tenants.admin_list(request, KIND_HOSPITAL, status=TenantStatus.PENDING_APPROVAL)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hospital_detail(request, hospital_id: int):
    return tenants.detail(request, KIND_HOSPITAL, hospital_id)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def approve_hospital(request, hospital_id: int):
    return tenants.set_status(request, KIND_HOSPITAL, hospital_id, ACTION_APPROVE)


@api_view(['POST', 'PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def reject_hospital(request, hospital_id: int):
    return tenants.set_status(request, KIND_HOSPITAL, hospital_id, ACTION_REJECT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def active_hospitals(request):
    return list_response(HospitalSummarySerializer(hospital_service.active_hospitals(), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hospitals_by_region(request, region: str):
    return list_response(HospitalSummarySerializer(hospital_service.active_hospitals(region), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def region_mapping(request, origin: str):
    """Target region for evacuations from ``origin``; unmapped origins get the default region."""
    mapping = RegionMapping(origin_region=origin, target_region=hospital_service.target_region_for(origin))
    return data_response(RegionMappingSerializer(mapping).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def hospital_stats(request):
    return data_response(hospital_service.hospital_stats())
