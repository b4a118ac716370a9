from django.utils import timezone

from coordination.models import Evacuation, Patient, VitalsLog
from coordination.services.tenants import RequestContext

RECENT_PATIENTS = 5


def clinic_stats(ctx: RequestContext):
    """Counters for the clinic portal landing page; every query filtered by the clinic."""
    start_of_day = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
    patients = Patient.objects.filter(clinic_id=ctx.tenant_id)
    return {
        'totalPatients': patients.count(),
        'todayVitals': VitalsLog.objects.filter(patient__clinic_id=ctx.tenant_id, recorded_at__gte=start_of_day).count(),
        'evacuations': Evacuation.objects.filter(origin_clinic_id=ctx.tenant_id, status=Evacuation.STATUS_IN_TRANSIT).count(),
    }, patients.order_by('-created_at')[:RECENT_PATIENTS]
