from rest_framework import serializers

from coordination.models import Patient
from coordination.services.risk import risk_bucket
from .fields import CleanCharField

GENDERS = ['male', 'female', 'other', 'M', 'F', 'O']
BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


class PatientCreateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    age = serializers.IntegerField(min_value=0, max_value=130, required=False, allow_null=True)
    gender = serializers.ChoiceField(choices=GENDERS, required=False, allow_blank=True)
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPES, required=False, allow_blank=True)
    contact_number = CleanCharField(max_length=32, required=False, allow_blank=True)
    emergency_contact = CleanCharField(max_length=255, required=False, allow_blank=True)

    def validate_name(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v


class PatientUpdateSerializer(PatientCreateSerializer):
    """Every field optional; clinic and code are not accepted."""
    name = CleanCharField(max_length=255, required=False)
    status = serializers.ChoiceField(choices=Patient.STATUS_CHOICES, required=False)
    is_critical = serializers.BooleanField(required=False)


class PatientListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Patient.STATUS_CHOICES, required=False)
    is_critical = serializers.BooleanField(required=False, allow_null=True, default=None)
    sort = serializers.ChoiceField(choices=['recent', 'risk'], required=False, default='recent')


class PatientSerializer(serializers.ModelSerializer):
    clinic_id = serializers.IntegerField(read_only=True)
    bucket = serializers.SerializerMethodField()

    class Meta:
        model = Patient
        fields = ['id', 'patient_code', 'clinic_id', 'name', 'age', 'gender', 'blood_type',
                  'contact_number', 'emergency_contact', 'status', 'is_critical', 'risk_score', 'bucket',
                  'heart_rate', 'blood_pressure', 'oxygen_saturation', 'temperature', 'respiratory_rate',
                  'created_at', 'updated_at']

    def get_bucket(self, obj) -> str:
        return risk_bucket(obj.risk_score)


class PatientSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Patient
        fields = ['id', 'patient_code', 'name', 'age', 'gender', 'blood_type', 'is_critical']
