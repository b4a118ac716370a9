from django.conf import settings
from rest_framework import serializers

from coordination.models import Evacuation
from .fields import CleanCharField
from .patients import PatientSummarySerializer


class EvacuationCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    urgency = serializers.ChoiceField(choices=Evacuation.URGENCY_CHOICES, required=False, default='medium')
    reason = CleanCharField(max_length=settings.NOTES_MAX_LENGTH, required=False, allow_blank=True)
    notes = CleanCharField(max_length=settings.NOTES_MAX_LENGTH, required=False, allow_blank=True)


class EvacuationUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Evacuation.STATUS_CHOICES, required=False)
    transport_id = CleanCharField(max_length=64, required=False, allow_blank=True)
    assigned_route_id = CleanCharField(max_length=64, required=False, allow_blank=True)
    eta = serializers.DateTimeField(required=False, allow_null=True)
    notes = CleanCharField(max_length=settings.NOTES_MAX_LENGTH, required=False, allow_blank=True)


class EvacuationListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Evacuation.STATUS_CHOICES, required=False)


class EvacuationSerializer(serializers.ModelSerializer):
    patient = PatientSummarySerializer(read_only=True)
    origin_clinic_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Evacuation
        fields = ['id', 'patient', 'origin_clinic_id', 'urgency', 'reason', 'notes', 'status',
                  'requested_by', 'transport_id', 'assigned_route_id', 'eta', 'departed_at',
                  'completed_at', 'created_at', 'updated_at']
