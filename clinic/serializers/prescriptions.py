import bleach
from rest_framework import serializers


class MedicationSerializer(serializers.Serializer):
    drugName = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=64)
    frequency = serializers.CharField(max_length=64)
    duration = serializers.CharField(max_length=64)
    instructions = serializers.CharField(required=False, allow_blank=True, max_length=255)

    def validate_drugName(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Drug name is required')
        return v


class PrescriptionCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True)
    medications = MedicationSerializer(many=True, allow_empty=False)

    def validate_notes(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class DispensedItemSerializer(serializers.Serializer):
    itemId = serializers.IntegerField()
    quantityDispensed = serializers.IntegerField(min_value=1)


class DispenseSerializer(serializers.Serializer):
    dispensed = DispensedItemSerializer(many=True, allow_empty=False)
