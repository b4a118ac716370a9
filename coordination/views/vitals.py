"""
Vitals logging.  ``POST`` answers with the computed risk score so the
clinic portal can raise its alert without a second round trip.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import HasActiveClinic
from ..serializers.vitals import (
    CompleteSessionSerializer, VitalsCreateSerializer, VitalsListQuerySerializer, VitalsLogSerializer,
)
from ..services import vitals as vitals_service
from .common import list_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def vitals(request):
    ctx = request.tenant_context
    if request.method == 'GET':
        q = VitalsListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = vitals_service.list_vitals(ctx, q.validated_data['patient_id'],
                                        limit=q.validated_data['limit'],
                                        active_session=q.validated_data['active_session'])
        return list_response(VitalsLogSerializer(qs, many=True).data)

    s = VitalsCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = vitals_service.log_vitals(ctx, s.validated_data)
    return Response({
        'data': VitalsLogSerializer(result.log).data,
        'score': result.score,
        'alerts': result.alerts,
        'isCritical': result.is_critical,
        'warning': bool(result.alerts),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def complete_session(request):
    s = CompleteSessionSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    closed = vitals_service.complete_session(request.tenant_context, s.validated_data['patient_id'])
    return Response({'data': {'patient_id': s.validated_data['patient_id'], 'closed': closed}})
