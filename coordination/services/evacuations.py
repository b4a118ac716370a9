"""
Evacuation requests raised by a clinic for one of its patients.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from coordination.exceptions import InvalidTransition, NotFound
from coordination.models import Evacuation, Patient
from coordination.realtime.broadcast import publish, to_admin, to_tenant
from coordination.serializers.evacuations import EvacuationSerializer
from coordination.services.patients import owned_patient
from coordination.services.tenants import KIND_CLINIC, RequestContext

logger = logging.getLogger(__name__)

# status -> statuses it may move to
EVACUATION_TRANSITIONS = {
    Evacuation.STATUS_REQUESTED: {Evacuation.STATUS_APPROVED, Evacuation.STATUS_IN_TRANSIT, Evacuation.STATUS_CANCELLED},
    Evacuation.STATUS_APPROVED: {Evacuation.STATUS_IN_TRANSIT, Evacuation.STATUS_CANCELLED},
    Evacuation.STATUS_IN_TRANSIT: {Evacuation.STATUS_COMPLETED, Evacuation.STATUS_CANCELLED},
    Evacuation.STATUS_COMPLETED: set(),
    Evacuation.STATUS_CANCELLED: set(),
}


def _with_patient():
    return Evacuation.objects.select_related('patient')


def list_evacuations(ctx: RequestContext, *, status: Optional[str]=None):
    qs = _with_patient().filter(origin_clinic_id=ctx.tenant_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('-id')


def request_evacuation(ctx: RequestContext, data: dict) -> Evacuation:
    with transaction.atomic():
        patient = owned_patient(ctx, data['patient_id'], for_update=True)
        evacuation = Evacuation.objects.create(
            patient=patient,
            origin_clinic_id=ctx.tenant_id,
            urgency=data.get('urgency') or 'medium',
            reason=data.get('reason', ''),
            notes=data.get('notes', ''),
            status=Evacuation.STATUS_REQUESTED,
            requested_by=ctx.principal.id,
        )
        patient.status = Patient.STATUS_EVACUATION_REQUESTED
        patient.save(update_fields=['status', 'updated_at'])

    logger.info('evacuation.requested id=%s patient=%s clinic=%s urgency=%s',
                evacuation.id, patient.id, ctx.tenant_id, evacuation.urgency)
    payload = {'evacuation': EvacuationSerializer(evacuation).data}
    publish(to_tenant(KIND_CLINIC, ctx.tenant_id), 'evacuation:requested', payload)
    publish(to_admin(), 'evacuation:requested', payload)
    return evacuation


def update_evacuation(ctx: RequestContext, evacuation_id: int, data: dict) -> Evacuation:
    with transaction.atomic():
        evacuation = Evacuation.objects.select_for_update().filter(id=evacuation_id, origin_clinic_id=ctx.tenant_id).first()
        if evacuation is None:
            raise NotFound('Evacuation not found')

        fields = []
        new_status = data.get('status')
        if new_status and new_status != evacuation.status:
            if new_status not in EVACUATION_TRANSITIONS[evacuation.status]:
                raise InvalidTransition(f'Cannot move evacuation from {evacuation.status} to {new_status}')
            evacuation.status = new_status
            fields.append('status')
            if new_status == Evacuation.STATUS_IN_TRANSIT:
                evacuation.departed_at = timezone.now()
                fields.append('departed_at')
            elif new_status == Evacuation.STATUS_COMPLETED:
                evacuation.completed_at = timezone.now()
                fields.append('completed_at')
        for field in ('transport_id', 'assigned_route_id', 'eta', 'notes'):
            if field in data:
                setattr(evacuation, field, data[field])
                fields.append(field)
        if fields:
            evacuation.save(update_fields=fields + ['updated_at'])

    logger.info('evacuation.updated id=%s status=%s clinic=%s', evacuation.id, evacuation.status, ctx.tenant_id)
    payload = {'evacuation': EvacuationSerializer(evacuation).data}
    publish(to_tenant(KIND_CLINIC, ctx.tenant_id), 'evacuation:updated', payload)
    publish(to_admin(), 'evacuation:updated', payload)
    return evacuation
