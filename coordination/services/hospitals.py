from typing import Optional

from django.conf import settings
from django.core.cache import cache

from coordination.models import Hospital, RegionMapping, TenantStatus

STATS_CACHE_KEY = 'hospitals:stats'
STATS_TTL = 60


def active_hospitals(region: Optional[str]=None):
    qs = Hospital.objects.filter(status=TenantStatus.ACTIVE)
    if region:
        qs = qs.filter(region=region)
    return qs.order_by('name')


def pending_hospitals():
    return Hospital.objects.filter(status=TenantStatus.PENDING_APPROVAL).order_by('-created_at')


def target_region_for(origin: Optional[str], *, default: Optional[str]=None) -> str:
    mapping = RegionMapping.objects.filter(origin_region=origin).first() if origin else None
    if mapping:
        return mapping.target_region
    return default if default is not None else settings.HOSPITAL_DEFAULT_TARGET_REGION


def hospital_stats():
    stats = cache.get(STATS_CACHE_KEY)
    if stats is None:
        stats = {
            'active': Hospital.objects.filter(status=TenantStatus.ACTIVE).count(),
            'pending': Hospital.objects.filter(status=TenantStatus.PENDING_APPROVAL).count(),
        }
        cache.set(STATS_CACHE_KEY, stats, STATS_TTL)
    return stats


def invalidate_stats():
    cache.delete(STATS_CACHE_KEY)
