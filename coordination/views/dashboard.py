"""
Clinic dashboard endpoint.

Counters for the clinic portal landing page: patients, readings taken
today, evacuations currently in transit and the five newest patients.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from ..permissions import HasActiveClinic
from ..serializers.patients import PatientSerializer
from ..services.dashboard import clinic_stats
from .common import data_response


@api_view(['GET'])
@permission_classes([IsAuthenticated, HasActiveClinic])
def dashboard_stats(request):
    stats, recent = clinic_stats(request.tenant_context)
    return data_response({'stats': stats, 'recentPatients': PatientSerializer(recent, many=True).data})
