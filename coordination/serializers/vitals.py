from django.conf import settings
from rest_framework import serializers

from coordination.models import VitalsLog
from .fields import CleanCharField


class VitalsCreateSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    heart_rate = serializers.FloatField(min_value=0, max_value=400, required=False, allow_null=True)
    blood_pressure = serializers.RegexField(r'^\s*\d{2,3}\s*/\s*\d{2,3}\s*$', required=False, allow_blank=True)
    spo2 = serializers.FloatField(min_value=0, max_value=100, required=False, allow_null=True)
    temperature = serializers.FloatField(min_value=0, max_value=115, required=False, allow_null=True)
    respiratory_rate = serializers.FloatField(min_value=0, max_value=120, required=False, allow_null=True)
    notes = CleanCharField(max_length=settings.NOTES_MAX_LENGTH, required=False, allow_blank=True)

    def validate(self, attrs):
        measured = ('heart_rate', 'blood_pressure', 'spo2', 'temperature', 'respiratory_rate')
        if not any(attrs.get(k) not in (None, '') for k in measured):
            raise serializers.ValidationError('at least one vital sign is required')
        return attrs


class VitalsListQuerySerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)
    limit = serializers.IntegerField(min_value=1, max_value=500, required=False, default=50)
    active_session = serializers.BooleanField(required=False, default=False)


class CompleteSessionSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(min_value=1)


class VitalsLogSerializer(serializers.ModelSerializer):
    patient_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = VitalsLog
        fields = ['id', 'patient_id', 'heart_rate', 'blood_pressure', 'spo2', 'temperature',
                  'respiratory_rate', 'notes', 'risk_score', 'is_session_closed', 'recorded_by', 'recorded_at']
