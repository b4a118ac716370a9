"""
Patient records, always scoped to the caller's clinic.
"""
from __future__ import annotations

import logging
import secrets
import string
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from coordination.exceptions import Forbidden, NotFound
from coordination.models import Patient
from coordination.realtime.broadcast import publish, to_tenant
from coordination.serializers.patients import PatientSerializer
from coordination.services.tenants import KIND_CLINIC, RequestContext

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_ATTEMPTS = 5
UPDATABLE_FIELDS = ('name', 'age', 'gender', 'blood_type', 'contact_number', 'emergency_contact', 'status', 'is_critical')


def generate_patient_code(now=None) -> str:
    year = (now or timezone.now()).year
    suffix = ''.join(secrets.choice(CODE_ALPHABET) for _ in range(5))
    return f'PAT-{year}-{suffix}'


def list_patients(ctx: RequestContext, *, status: Optional[str]=None, is_critical: Optional[bool]=None, sort: str='recent'):
    qs = Patient.objects.filter(clinic_id=ctx.tenant_id)
    if status:
        qs = qs.filter(status=status)
    if is_critical:
        qs = qs.filter(is_critical=True)
    if sort == 'risk':
        return qs.order_by('-risk_score', '-created_at')
    return qs.order_by('-created_at')


def get_patient(ctx: RequestContext, patient_id: int) -> Patient:
    patient = Patient.objects.filter(id=patient_id, clinic_id=ctx.tenant_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    return patient


def owned_patient(ctx: RequestContext, patient_id: int, *, for_update: bool=False) -> Patient:
    """Check a referenced patient belongs to the caller's clinic before a dependent write."""
    qs = Patient.objects.select_for_update() if for_update else Patient.objects
    patient = qs.filter(id=patient_id).first()
    # missing and foreign patients look the same to the caller
    if patient is None or patient.clinic_id != ctx.tenant_id:
        logger.warning('patient.foreign_reference patient=%s clinic=%s principal=%s',
                       patient_id, ctx.tenant_id, ctx.principal.id)
        raise Forbidden('Unauthorized access to this patient')
    return patient


def create_patient(ctx: RequestContext, data: dict) -> Patient:
    for attempt in range(CODE_ATTEMPTS):
        try:
            with transaction.atomic():
                patient = Patient.objects.create(
                    clinic_id=ctx.tenant_id,
                    patient_code=generate_patient_code(),
                    status=Patient.STATUS_STABLE,
                    **data,
                )
            break
        except IntegrityError:
            if attempt == CODE_ATTEMPTS - 1:
                raise
            logger.info('patient.code_collision attempt=%s', attempt + 1)

    logger.info('patient.created id=%s clinic=%s', patient.id, ctx.tenant_id)
    publish(to_tenant(KIND_CLINIC, ctx.tenant_id), 'patient:created', {'patient': PatientSerializer(patient).data})
    return patient


def update_patient(ctx: RequestContext, patient_id: int, data: dict) -> Patient:
    patient = get_patient(ctx, patient_id)
    changed = []
    for field in UPDATABLE_FIELDS:
        if field in data:
            setattr(patient, field, data[field])
            changed.append(field)
    if data.get('status') == Patient.STATUS_CRITICAL and 'is_critical' not in data:
        patient.is_critical = True
        changed.append('is_critical')
    if changed:
        patient.save(update_fields=changed + ['updated_at'])

    if data.get('status') == Patient.STATUS_CRITICAL:
        publish(to_tenant(KIND_CLINIC, ctx.tenant_id), 'patient:critical', {'patient': PatientSerializer(patient).data})
    return patient
