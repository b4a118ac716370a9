from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import HasActiveClinic
from ..serializers.evacuations import (
    EvacuationCreateSerializer, EvacuationListQuerySerializer, EvacuationSerializer, EvacuationUpdateSerializer,
)
from ..services import evacuations as evacuation_service
from .common import data_response, list_response


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def evacuations(request):
    """List the clinic's evacuations, or request one for a patient of the clinic."""
    ctx = request.tenant_context
    if request.method == 'GET':
        q = EvacuationListQuerySerializer(data=request.query_params)
        q.is_valid(raise_exception=True)
        qs = evacuation_service.list_evacuations(ctx, status=q.validated_data.get('status'))
        return list_response(EvacuationSerializer(qs, many=True).data)

    s = EvacuationCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    evacuation = evacuation_service.request_evacuation(ctx, s.validated_data)
    return data_response(EvacuationSerializer(evacuation).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def evacuation_detail(request, evacuation_id: int):
    s = EvacuationUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    evacuation = evacuation_service.update_evacuation(request.tenant_context, evacuation_id, s.validated_data)
    return data_response(EvacuationSerializer(evacuation).data)
