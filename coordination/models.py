"""
Database models for the evacuation coordination backend.

Tenants (clinics and hospitals) are owned by exactly one external
principal, identified by the id issued by the auth service.  Every
clinical record carries the foreign key of the tenant that owns it;
handlers always derive that key from the request context.
"""
from __future__ import annotations

from django.db import models


class TenantStatus(models.TextChoices):
    PENDING_APPROVAL = 'pending_approval', 'Pending approval'
    ACTIVE = 'active', 'Active'
    SUSPENDED = 'suspended', 'Suspended'


class Tenant(models.Model):
    """Fields shared by clinics and hospitals.

    ``owner_id`` is unique so that registration can be an upsert keyed on
    the owning principal: one principal owns at most one tenant of each
    kind.
    """
    name = models.CharField(max_length=255)
    owner_id = models.CharField(max_length=64, unique=True)
    owner_email = models.EmailField(blank=True)
    status = models.CharField(
        max_length=20, choices=TenantStatus.choices, default=TenantStatus.PENDING_APPROVAL, db_index=True
    )
    region = models.CharField(max_length=120, blank=True, db_index=True)
    contact_phone = models.CharField(max_length=32, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    @property
    def is_active(self) -> bool:
        return self.status == TenantStatus.ACTIVE


class Clinic(Tenant):
    """A remote clinic that registers patients and requests evacuations."""
    location_name = models.CharField(max_length=255, blank=True)
    region_type = models.CharField(max_length=64, blank=True)
    facility_level = models.CharField(max_length=64, blank=True)

    def __str__(self) -> str:
        return f"{self.name} (clinic #{self.id}, {self.status})"


class Hospital(Tenant):
    """A receiving hospital that acknowledges critical cases."""
    city = models.CharField(max_length=120, blank=True)
    address = models.TextField(blank=True)
    facility_type = models.CharField(max_length=64, blank=True)

    def __str__(self) -> str:
        return f"{self.name} (hospital #{self.id}, {self.status})"


class RegionMapping(models.Model):
    """Which region's hospitals receive evacuations from an origin region."""
    origin_region = models.CharField(max_length=120, unique=True)
    target_region = models.CharField(max_length=120)

    def __str__(self) -> str:
        return f"{self.origin_region} -> {self.target_region}"


class Patient(models.Model):
    STATUS_STABLE = 'stable'
    STATUS_CRITICAL = 'critical'
    STATUS_EVACUATION_REQUESTED = 'evacuation_requested'
    STATUS_EVACUATED = 'evacuated'
    STATUS_DISCHARGED = 'discharged'
    STATUS_CHOICES = (
        (STATUS_STABLE, 'stable'),
        (STATUS_CRITICAL, 'critical'),
        (STATUS_EVACUATION_REQUESTED, 'evacuation_requested'),
        (STATUS_EVACUATED, 'evacuated'),
        (STATUS_DISCHARGED, 'discharged'),
    )

    clinic = models.ForeignKey(Clinic, on_delete=models.CASCADE, related_name='patients')
    patient_code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=255)
    age = models.PositiveIntegerField(null=True, blank=True)
    gender = models.CharField(max_length=16, blank=True)
    blood_type = models.CharField(max_length=8, blank=True)
    contact_number = models.CharField(max_length=32, blank=True)
    emergency_contact = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=STATUS_STABLE, db_index=True)
    is_critical = models.BooleanField(default=False, db_index=True)
    risk_score = models.PositiveIntegerField(default=0)

    # Latest vitals, copied from the most recent VitalsLog
    heart_rate = models.FloatField(null=True, blank=True)
    blood_pressure = models.CharField(max_length=16, blank=True)
    oxygen_saturation = models.FloatField(null=True, blank=True)
    temperature = models.FloatField(null=True, blank=True)
    respiratory_rate = models.FloatField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['clinic', 'created_at']),
            models.Index(fields=['clinic', 'risk_score']),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.patient_code})"


class Evacuation(models.Model):
    URGENCY_CHOICES = (
        ('low', 'low'),
        ('medium', 'medium'),
        ('high', 'high'),
        ('critical', 'critical'),
    )
    STATUS_REQUESTED = 'requested'
    STATUS_APPROVED = 'approved'
    STATUS_IN_TRANSIT = 'in_transit'
    STATUS_COMPLETED = 'completed'
    STATUS_CANCELLED = 'cancelled'
    STATUS_CHOICES = (
        (STATUS_REQUESTED, 'requested'),
        (STATUS_APPROVED, 'approved'),
        (STATUS_IN_TRANSIT, 'in_transit'),
        (STATUS_COMPLETED, 'completed'),
        (STATUS_CANCELLED, 'cancelled'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='evacuations')
    origin_clinic = models.ForeignKey(Clinic, on_delete=models.CASCADE, related_name='evacuations')
    urgency = models.CharField(max_length=16, choices=URGENCY_CHOICES, default='medium')
    reason = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_REQUESTED, db_index=True)
    requested_by = models.CharField(max_length=64)
    transport_id = models.CharField(max_length=64, blank=True)
    assigned_route_id = models.CharField(max_length=64, blank=True)
    eta = models.DateTimeField(null=True, blank=True)
    departed_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=['origin_clinic', 'status'])]

    def __str__(self) -> str:
        return f"evac #{self.id} p={self.patient_id} ({self.status})"


class VitalsLog(models.Model):
    """One vitals reading.  Ownership follows the patient's clinic."""
    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='vitals')
    heart_rate = models.FloatField(null=True, blank=True)
    blood_pressure = models.CharField(max_length=16, blank=True)
    spo2 = models.FloatField(null=True, blank=True)
    temperature = models.FloatField(null=True, blank=True)
    respiratory_rate = models.FloatField(null=True, blank=True)
    notes = models.TextField(blank=True)
    risk_score = models.PositiveIntegerField(default=0)
    is_session_closed = models.BooleanField(default=False)
    recorded_by = models.CharField(max_length=64)
    recorded_at = models.DateTimeField(db_index=True)

    class Meta:
        indexes = [models.Index(fields=['patient', 'recorded_at'])]

    def __str__(self) -> str:
        return f"vitals #{self.id} p={self.patient_id} @ {self.recorded_at:%F %T}"


class CriticalCase(models.Model):
    """A critical patient shared by a clinic with one receiving hospital."""
    STATUS_SHARED = 'shared'
    STATUS_ACKNOWLEDGED = 'acknowledged'
    STATUS_CLOSED = 'closed'
    STATUS_CHOICES = (
        (STATUS_SHARED, 'shared'),
        (STATUS_ACKNOWLEDGED, 'acknowledged'),
        (STATUS_CLOSED, 'closed'),
    )

    patient = models.ForeignKey(Patient, on_delete=models.CASCADE, related_name='critical_cases')
    clinic = models.ForeignKey(Clinic, on_delete=models.CASCADE, related_name='critical_cases')
    target_hospital = models.ForeignKey(Hospital, on_delete=models.CASCADE, related_name='critical_cases')
    notes = models.TextField(blank=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_SHARED, db_index=True)
    shared_at = models.DateTimeField(auto_now_add=True)
    acknowledged_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        indexes = [
            models.Index(fields=['target_hospital', 'shared_at']),
            models.Index(fields=['clinic', 'shared_at']),
        ]

    def __str__(self) -> str:
        return f"case #{self.id} p={self.patient_id} -> h={self.target_hospital_id} ({self.status})"


class AuditEvent(models.Model):
    """Who did what to which tenant; actors are external principals."""
    actor_id = models.CharField(max_length=64, blank=True)
    actor_email = models.EmailField(blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at']),
            models.Index(fields=['object_type', 'object_id', 'created_at']),
        ]

    def __str__(self):
        return f"{self.action}:{self.actor_id}@{self.created_at:%F %T}"
