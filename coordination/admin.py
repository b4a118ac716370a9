"""
Django admin registrations for the coordination models.

Platform operators use the admin to inspect tenants and clinical
records.  Tenant approval goes through the API so that it is audited
and broadcast; the status field is therefore read-only here.
"""

from django.contrib import admin

from .models import (
    AuditEvent,
    Clinic,
    CriticalCase,
    Evacuation,
    Hospital,
    Patient,
    RegionMapping,
    VitalsLog,
)


@admin.register(Clinic)
class ClinicAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'status', 'region', 'owner_email', 'created_at')
    list_filter = ('status', 'region')
    search_fields = ('name', 'owner_email', 'owner_id')
    readonly_fields = ('status', 'owner_id')


@admin.register(Hospital)
class HospitalAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'status', 'region', 'city', 'owner_email', 'created_at')
    list_filter = ('status', 'region')
    search_fields = ('name', 'city', 'owner_email', 'owner_id')
    readonly_fields = ('status', 'owner_id')


@admin.register(RegionMapping)
class RegionMappingAdmin(admin.ModelAdmin):
    list_display = ('origin_region', 'target_region')
    search_fields = ('origin_region', 'target_region')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('patient_code', 'name', 'clinic', 'status', 'is_critical', 'risk_score', 'created_at')
    list_filter = ('status', 'is_critical', 'clinic')
    search_fields = ('patient_code', 'name')


@admin.register(Evacuation)
class EvacuationAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'origin_clinic', 'urgency', 'status', 'created_at')
    list_filter = ('status', 'urgency')


@admin.register(VitalsLog)
class VitalsLogAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'risk_score', 'is_session_closed', 'recorded_at')
    list_filter = ('is_session_closed',)


@admin.register(CriticalCase)
class CriticalCaseAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'clinic', 'target_hospital', 'status', 'shared_at', 'acknowledged_at')
    list_filter = ('status',)


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'actor_email', 'object_type', 'object_id', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('actor_email', 'actor_id')
