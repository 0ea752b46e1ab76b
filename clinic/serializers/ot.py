import bleach
from rest_framework import serializers

from clinic.models import Theater


class TheaterCreateSerializer(serializers.Serializer):
    id = serializers.RegexField(r'^[A-Za-z0-9-]{1,20}$')
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)


class TheaterUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=120)
    status = serializers.ChoiceField(choices=[c[0] for c in Theater.STATUS_CHOICES], required=False)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Nothing to update')
        return attrs


class ConflictCheckSerializer(serializers.Serializer):
    theaterId = serializers.CharField(max_length=20)
    scheduledTime = serializers.DateTimeField()
    # Free text such as "1.5 hours"; only the leading number is used
    estimatedDuration = serializers.CharField(required=False, allow_blank=True, default='')


class ScheduleSurgerySerializer(ConflictCheckSerializer):
    patientId = serializers.IntegerField()
    procedure = serializers.CharField(max_length=255)
    surgeonId = serializers.IntegerField(required=False, allow_null=True)
    surgeonIds = serializers.ListField(child=serializers.IntegerField(), required=False)
    priority = serializers.CharField(required=False, allow_blank=True, max_length=20, default='normal')
    notes = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_procedure(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Procedure is required')
        return v

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)

    def validate_priority(self, v):
        return (v or 'normal').strip().lower()
