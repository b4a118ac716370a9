"""
Patient endpoints for an active clinic.

The owning clinic always comes from ``request.tenant_context``; a
``clinic_id`` in the body is not a serializer field and is dropped.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import HasActiveClinic
from ..serializers.patients import (
    PatientCreateSerializer, PatientListQuerySerializer, PatientSerializer, PatientUpdateSerializer,
)
from ..serializers.vitals import VitalsLogSerializer
from ..services import patients as patient_service
from .common import data_response, list_response

RECENT_VITALS = 20


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def patients(request):
    ctx = request.tenant_context
    if request.method == 'GET':
        q = PatientListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = patient_service.list_patients(ctx, **q.validated_data)
        return list_response(PatientSerializer(qs, many=True).data)

    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_service.create_patient(ctx, s.validated_data)
    return data_response(PatientSerializer(patient).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def patient_detail(request, patient_id: int):
    ctx = request.tenant_context
    if request.method == 'GET':
        patient = patient_service.get_patient(ctx, patient_id)
        data = PatientSerializer(patient).data
        data['vitals'] = VitalsLogSerializer(patient.vitals.order_by('-recorded_at')[:RECENT_VITALS], many=True).data
        return data_response(data)

    s = PatientUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    patient = patient_service.update_patient(ctx, patient_id, s.validated_data)
    return data_response(PatientSerializer(patient).data)
