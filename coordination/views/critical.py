"""
Critical case hand-off.

Clinics share a critical patient with one active hospital; the hospital
sees only cases that target it and acknowledges them.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import HasActiveClinic, HasActiveHospital
from ..serializers.critical import (
    ClinicSummarySerializer, CriticalCaseSerializer, CriticalListQuerySerializer, CriticalShareSerializer,
)
from ..serializers.patients import PatientSerializer
from ..serializers.tenants import HospitalSummarySerializer
from ..serializers.vitals import VitalsLogSerializer
from ..services import critical as critical_service
from .common import data_response, list_response


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def nearby_hospitals(request):
    clinic, region, hospitals = critical_service.nearby_hospitals(request.tenant_context)
    return list_response(
        HospitalSummarySerializer(hospitals, many=True).data,
        clinic=ClinicSummarySerializer(clinic).data,
        targetRegion=region,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def share_case(request):
    s = CriticalShareSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    case, existing = critical_service.share_case(request.tenant_context, s.validated_data)
    return data_response(
        CriticalCaseSerializer(case).data,
        status=status.HTTP_200_OK if existing else status.HTTP_201_CREATED,
        isExisting=existing,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def clinic_cases(request):
    return list_response(CriticalCaseSerializer(critical_service.clinic_cases(request.tenant_context), many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasActiveHospital])
def hospital_cases(request):
    q = CriticalListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    qs = critical_service.hospital_cases(request.tenant_context, status=q.validated_data.get('status'))
    return list_response(CriticalCaseSerializer(qs, many=True).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasActiveHospital])
def acknowledge_case(request, case_id: int):
    case = critical_service.acknowledge_case(request.tenant_context, case_id)
    return data_response(CriticalCaseSerializer(case).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasActiveHospital])
def case_patient(request, patient_id: int):
    patient, vitals = critical_service.patient_for_hospital(request.tenant_context, patient_id)
    data = PatientSerializer(patient).data
    data['vitals'] = VitalsLogSerializer(vitals, many=True).data
    return data_response(data)
