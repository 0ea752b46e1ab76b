import bleach
from rest_framework import serializers


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class PatientCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    age = serializers.IntegerField(required=False, allow_null=True, min_value=0, max_value=150)
    gender = serializers.CharField(required=False, allow_blank=True, max_length=16)
    phone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    condition = serializers.CharField(required=False, allow_blank=True, max_length=255)
    departmentId = serializers.IntegerField(required=False, allow_null=True)

    def validate_name(self, v):
        v = _clean(v)
        if len(v) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return v

    def validate_phone(self, v):
        return _clean(v)

    def validate_condition(self, v):
        return _clean(v)


class PatientUpdateSerializer(PatientCreateSerializer):
    name = serializers.CharField(max_length=255, required=False)
    status = serializers.ChoiceField(choices=['Active', 'Inactive'], required=False)


class VitalsSerializer(serializers.Serializer):
    temp = serializers.CharField(required=False, allow_blank=True, max_length=16)
    bp = serializers.CharField(required=False, allow_blank=True, max_length=16)
    pulse = serializers.CharField(required=False, allow_blank=True, max_length=16)
    spo2 = serializers.CharField(required=False, allow_blank=True, max_length=16)
    respiratoryRate = serializers.CharField(required=False, allow_blank=True, max_length=16)
    weight = serializers.CharField(required=False, allow_blank=True, max_length=16)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('No vitals provided')
        return attrs
