import bleach
from rest_framework import serializers

from clinic.models import EmergencyAlert


class AlertCreateSerializer(serializers.Serializer):
    codeType = serializers.CharField(max_length=64)
    location = serializers.CharField(max_length=255)
    message = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=5)
    broadcastTo = serializers.ListField(child=serializers.CharField(max_length=32), required=False)

    def validate_message(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_location(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Location is required')
        return v


class AlertUpdateSerializer(serializers.Serializer):
    codeType = serializers.CharField(max_length=64, required=False)
    location = serializers.CharField(max_length=255, required=False)
    message = serializers.CharField(required=False, allow_blank=True)
    priority = serializers.IntegerField(required=False, min_value=1, max_value=5)
    status = serializers.ChoiceField(choices=[c[0] for c in EmergencyAlert.STATUS_CHOICES], required=False)
    broadcastTo = serializers.ListField(child=serializers.CharField(max_length=32), required=False)

    def validate_message(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class EmergencyCaseSerializer(serializers.Serializer):
    patientName = serializers.CharField(max_length=255)
    condition = serializers.CharField(max_length=255)
    priority = serializers.ChoiceField(choices=['critical', 'high', 'medium', 'low'], required=False, default='high')

    def validate_patientName(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate_condition(self, v):
        return bleach.clean(v.strip(), strip=True)
