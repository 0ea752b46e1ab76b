from rest_framework import serializers

from clinic.models import BloodUnit


class DrugSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    category = serializers.CharField(required=False, allow_blank=True, max_length=120)
    currentStock = serializers.IntegerField(min_value=0)
    minStock = serializers.IntegerField(required=False, min_value=0)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    batchNumber = serializers.CharField(required=False, allow_blank=True, max_length=64)
    expiryDate = serializers.DateTimeField(required=False, allow_null=True)

    def validate_category(self, v):
        return v or 'General'


class BloodUnitSerializer(serializers.Serializer):
    bloodType = serializers.ChoiceField(choices=BloodUnit.BLOOD_TYPES)
    unitsAvailable = serializers.IntegerField(min_value=0)
    criticalLevel = serializers.IntegerField(required=False, min_value=0)
    status = serializers.CharField(required=False, max_length=32)
    expiryDate = serializers.DateTimeField()
    collectionDate = serializers.DateTimeField()
    donorId = serializers.CharField(required=False, allow_blank=True, max_length=64)
    location = serializers.CharField(required=False, allow_blank=True, max_length=255)
    batchNumber = serializers.CharField(required=False, allow_blank=True, max_length=64)

    def validate(self, attrs):
        expiry, collected = attrs.get('expiryDate'), attrs.get('collectionDate')
        if expiry and collected and expiry <= collected:
            raise serializers.ValidationError({'expiryDate': ['Expiry must be after collection']})
        return attrs


DRUG_FIELD_MAP = {
    'name': 'name', 'category': 'category', 'currentStock': 'current_stock', 'minStock': 'min_stock',
    'location': 'location', 'batchNumber': 'batch_number', 'expiryDate': 'expiry_date',
}
BLOOD_FIELD_MAP = {
    'bloodType': 'blood_type', 'unitsAvailable': 'units_available', 'criticalLevel': 'critical_level',
    'status': 'status', 'expiryDate': 'expiry_date', 'collectionDate': 'collection_date',
    'donorId': 'donor_id', 'location': 'location', 'batchNumber': 'batch_number',
}


def remap(validated: dict, mapping: dict) -> dict:
    return {mapping[k]: v for k, v in validated.items() if k in mapping}
