from rest_framework import serializers

from coordination.models import Clinic, Hospital, RegionMapping, TenantStatus
from .fields import CleanCharField


class ClinicRegisterSerializer(serializers.Serializer):
    # owner and status are never taken from the body
    name = CleanCharField(max_length=255)
    region = CleanCharField(max_length=120, required=False, allow_blank=True)
    location_name = CleanCharField(max_length=255, required=False, allow_blank=True)
    region_type = CleanCharField(max_length=64, required=False, allow_blank=True)
    facility_level = CleanCharField(max_length=64, required=False, allow_blank=True)
    contact_phone = CleanCharField(max_length=32, required=False, allow_blank=True)

    def validate_name(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v


class HospitalRegisterSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    region = CleanCharField(max_length=120, required=False, allow_blank=True)
    city = CleanCharField(max_length=120, required=False, allow_blank=True)
    address = CleanCharField(max_length=1000, required=False, allow_blank=True)
    facility_type = CleanCharField(max_length=64, required=False, allow_blank=True)
    contact_phone = CleanCharField(max_length=32, required=False, allow_blank=True)

    def validate_name(self, v):
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v


class TenantListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TenantStatus.choices, required=False)


class ClinicSerializer(serializers.ModelSerializer):
    class Meta:
        model = Clinic
        fields = ['id', 'name', 'owner_id', 'owner_email', 'status', 'region', 'location_name',
                  'region_type', 'facility_level', 'contact_phone', 'created_at', 'updated_at']


class HospitalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Hospital
        fields = ['id', 'name', 'owner_id', 'owner_email', 'status', 'region', 'city', 'address',
                  'facility_type', 'contact_phone', 'created_at', 'updated_at']


class HospitalSummarySerializer(serializers.ModelSerializer):
    """Public directory fields only; no owner details."""

    class Meta:
        model = Hospital
        fields = ['id', 'name', 'region', 'city', 'address', 'facility_type', 'contact_phone']


class RegionMappingSerializer(serializers.ModelSerializer):
    class Meta:
        model = RegionMapping
        fields = ['origin_region', 'target_region']


TENANT_SERIALIZERS = {
    'clinic': (ClinicRegisterSerializer, ClinicSerializer),
    'hospital': (HospitalRegisterSerializer, HospitalSerializer),
}
