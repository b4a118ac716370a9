"""
Critical case hand-off between a clinic and a receiving hospital.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from django.db import transaction
from django.utils import timezone

from coordination.exceptions import NotFound
from coordination.models import Clinic, CriticalCase, Hospital, Patient, TenantStatus, VitalsLog
from coordination.realtime.broadcast import publish, to_tenant
from coordination.serializers.critical import CriticalCaseSerializer
from coordination.services.hospitals import target_region_for
from coordination.services.patients import owned_patient
from coordination.services.tenants import KIND_CLINIC, KIND_HOSPITAL, RequestContext

logger = logging.getLogger(__name__)


def _cases():
    return CriticalCase.objects.select_related('patient', 'clinic', 'target_hospital')


def nearby_hospitals(ctx: RequestContext) -> Tuple[Clinic, str, list]:
    """Active hospitals in the region the caller's clinic evacuates to."""
    clinic = Clinic.objects.get(id=ctx.tenant_id)
    region = target_region_for(clinic.region, default=clinic.region)
    hospitals = Hospital.objects.filter(region=region, status=TenantStatus.ACTIVE).order_by('name')
    return clinic, region, list(hospitals)


def share_case(ctx: RequestContext, data: dict) -> Tuple[CriticalCase, bool]:
    """Share a patient with a hospital; returns ``(case, is_existing)``."""
    with transaction.atomic():
        patient = owned_patient(ctx, data['patient_id'], for_update=True)
        existing = _cases().filter(patient=patient, status=CriticalCase.STATUS_SHARED).first()
        if existing is not None:
            return existing, True

        hospital = Hospital.objects.filter(id=data['hospital_id'], status=TenantStatus.ACTIVE).first()
        if hospital is None:
            raise NotFound('Hospital not found or not active')

        patient.is_critical = True
        patient.save(update_fields=['is_critical', 'updated_at'])
        case = CriticalCase.objects.create(
            patient=patient,
            clinic_id=ctx.tenant_id,
            target_hospital=hospital,
            notes=data.get('notes', ''),
            status=CriticalCase.STATUS_SHARED,
        )

    case = _cases().get(id=case.id)
    logger.info('critical.shared id=%s patient=%s clinic=%s hospital=%s', case.id, patient.id, ctx.tenant_id, hospital.id)
    publish(to_tenant(KIND_HOSPITAL, hospital.id), 'critical:new', CriticalCaseSerializer(case).data)
    return case, False


def clinic_cases(ctx: RequestContext):
    return _cases().filter(clinic_id=ctx.tenant_id).order_by('-shared_at')


def hospital_cases(ctx: RequestContext, *, status: Optional[str]=None):
    qs = _cases().filter(target_hospital_id=ctx.tenant_id)
    if status:
        qs = qs.filter(status=status)
    return qs.order_by('-shared_at')


def acknowledge_case(ctx: RequestContext, case_id: int) -> CriticalCase:
    with transaction.atomic():
        case = CriticalCase.objects.select_for_update().filter(id=case_id, target_hospital_id=ctx.tenant_id).first()
        if case is None:
            raise NotFound('Case not found')
        if case.status == CriticalCase.STATUS_ACKNOWLEDGED:
            return _cases().get(id=case.id)
        case.status = CriticalCase.STATUS_ACKNOWLEDGED
        case.acknowledged_at = timezone.now()
        case.save(update_fields=['status', 'acknowledged_at'])

    case = _cases().get(id=case.id)
    logger.info('critical.acknowledged id=%s hospital=%s clinic=%s', case.id, ctx.tenant_id, case.clinic_id)
    publish(to_tenant(KIND_CLINIC, case.clinic_id), 'critical:acknowledged', CriticalCaseSerializer(case).data)
    return case


def patient_for_hospital(ctx: RequestContext, patient_id: int) -> Tuple[Patient, list]:
    """Patient record and full vitals history, visible only through a case targeting the caller."""
    if not CriticalCase.objects.filter(patient_id=patient_id, target_hospital_id=ctx.tenant_id).exists():
        raise NotFound('Patient not found')
    patient = Patient.objects.get(id=patient_id)
    vitals = list(VitalsLog.objects.filter(patient_id=patient_id).order_by('recorded_at'))
    return patient, vitals
