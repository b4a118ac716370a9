from django.conf import settings
from rest_framework import serializers

from coordination.models import Clinic, CriticalCase
from .fields import CleanCharField
from .patients import PatientSummarySerializer
from .tenants import HospitalSummarySerializer


class CriticalShareSerializer(serializers.Serializer):
    # clinic comes from the caller's context, not from here
    patient_id = serializers.IntegerField(min_value=1)
    hospital_id = serializers.IntegerField(min_value=1)
    notes = CleanCharField(max_length=settings.NOTES_MAX_LENGTH, required=False, allow_blank=True)


class CriticalListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CriticalCase.STATUS_CHOICES, required=False)


class ClinicSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Clinic
        fields = ['id', 'name', 'region', 'location_name']


class CriticalCaseSerializer(serializers.ModelSerializer):
    patient = PatientSummarySerializer(read_only=True)
    clinic = ClinicSummarySerializer(read_only=True)
    hospital = HospitalSummarySerializer(source='target_hospital', read_only=True)
    target_hospital_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = CriticalCase
        fields = ['id', 'patient', 'clinic', 'hospital', 'target_hospital_id', 'notes', 'status',
                  'shared_at', 'acknowledged_at']
