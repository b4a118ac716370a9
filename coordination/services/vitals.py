"""
Vitals logging and risk escalation.

Logging a reading copies it onto the patient as the latest vitals,
recomputes the risk score and escalates the patient to critical once
the score reaches ``CRITICAL_RISK_THRESHOLD``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from coordination.models import Patient, VitalsLog
from coordination.realtime.broadcast import publish, to_tenant
from coordination.serializers.vitals import VitalsLogSerializer
from coordination.services.patients import owned_patient
from coordination.services.risk import calculate_risk_score
from coordination.services.tenants import KIND_CLINIC, RequestContext

logger = logging.getLogger(__name__)

VITAL_FIELDS = ('heart_rate', 'blood_pressure', 'spo2', 'temperature', 'respiratory_rate')


@dataclass
class VitalsResult:
    log: VitalsLog
    score: int
    alerts: List[str]
    is_critical: bool


def list_vitals(ctx: RequestContext, patient_id: int, *, limit: int=50, active_session: bool=False):
    owned_patient(ctx, patient_id)
    qs = VitalsLog.objects.filter(patient_id=patient_id)
    if active_session:
        qs = qs.filter(is_session_closed=False)
    return qs.order_by('-recorded_at')[:limit]


def log_vitals(ctx: RequestContext, data: dict) -> VitalsResult:
    readings = {k: data.get(k) for k in VITAL_FIELDS}
    if readings['blood_pressure']:
        readings['blood_pressure'] = readings['blood_pressure'].replace(' ', '')
    score, alerts = calculate_risk_score(readings)
    threshold = settings.CRITICAL_RISK_THRESHOLD

    with transaction.atomic():
        patient = owned_patient(ctx, data['patient_id'], for_update=True)
        log = VitalsLog.objects.create(
            patient=patient,
            heart_rate=readings['heart_rate'],
            blood_pressure=readings['blood_pressure'] or '',
            spo2=readings['spo2'],
            temperature=readings['temperature'],
            respiratory_rate=readings['respiratory_rate'],
            notes=data.get('notes', ''),
            risk_score=score,
            recorded_by=ctx.principal.id,
            recorded_at=timezone.now(),
        )
        patient.heart_rate = readings['heart_rate']
        patient.blood_pressure = readings['blood_pressure'] or ''
        patient.oxygen_saturation = readings['spo2']
        patient.temperature = readings['temperature']
        patient.respiratory_rate = readings['respiratory_rate']
        patient.risk_score = score
        fields = ['heart_rate', 'blood_pressure', 'oxygen_saturation', 'temperature',
                  'respiratory_rate', 'risk_score', 'updated_at']
        is_critical = score >= threshold
        if is_critical:
            patient.status = Patient.STATUS_CRITICAL
            patient.is_critical = True
            fields += ['status', 'is_critical']
        patient.save(update_fields=fields)

    logger.info('vitals.logged id=%s patient=%s score=%s critical=%s', log.id, patient.id, score, is_critical)
    room = to_tenant(KIND_CLINIC, ctx.tenant_id)
    body = VitalsLogSerializer(log).data
    if is_critical:
        publish(room, 'vitals:critical', {'patientId': patient.id, 'vitals': body, 'score': score, 'alerts': alerts})
    publish(room, 'vitals:logged', {'vitals': body})
    return VitalsResult(log=log, score=score, alerts=alerts, is_critical=is_critical)


def complete_session(ctx: RequestContext, patient_id: int) -> int:
    """Close every open reading of the patient; returns how many were closed."""
    owned_patient(ctx, patient_id)
    closed = VitalsLog.objects.filter(patient_id=patient_id, is_session_closed=False).update(is_session_closed=True)
    logger.info('vitals.session_closed patient=%s closed=%s', patient_id, closed)
    return closed
