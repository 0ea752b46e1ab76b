from rest_framework import serializers

from clinic.models import Token


class TokenCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    departmentId = serializers.IntegerField()
    priority = serializers.ChoiceField(choices=[c[0] for c in Token.PRIORITY_CHOICES], required=False, default='Normal')


class TokenStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in Token.STATUS_CHOICES])
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default='')
