import bleach
from rest_framework import serializers

from clinic.models import Department
from clinic.services.departments import split_list


class _ListOrCsvField(serializers.Field):
    """Accepts ["a", "b"] or "a, b"."""

    def to_internal_value(self, data):
        if not isinstance(data, (str, list, tuple)):
            raise serializers.ValidationError('Expected a list or a comma separated string')
        return [bleach.clean(item, strip=True) for item in split_list(data)]

    def to_representation(self, value):
        return value


class DepartmentSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=120)
    description = serializers.CharField(allow_blank=True)
    location = serializers.CharField(max_length=255)
    contactNumber = serializers.CharField(required=False, allow_blank=True, max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    operatingHours = serializers.CharField(required=False, allow_blank=True, max_length=120)
    status = serializers.ChoiceField(choices=[c[0] for c in Department.STATUS_CHOICES], required=False)
    capacity = serializers.IntegerField(required=False, min_value=0)
    currentOccupancy = serializers.IntegerField(required=False, min_value=0)
    specializations = _ListOrCsvField(required=False)
    equipment = _ListOrCsvField(required=False)

    def validate_name(self, v):
        v = bleach.clean(v.strip(), strip=True)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_description(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate(self, attrs):
        capacity = attrs.get('capacity')
        occupancy = attrs.get('currentOccupancy')
        if capacity is not None and occupancy is not None and occupancy > capacity:
            raise serializers.ValidationError({'currentOccupancy': ['Occupancy exceeds capacity']})
        return attrs


FIELD_MAP = {
    'name': 'name',
    'description': 'description',
    'location': 'location',
    'contactNumber': 'contact_number',
    'email': 'email',
    'operatingHours': 'operating_hours',
    'status': 'status',
    'capacity': 'capacity',
    'currentOccupancy': 'current_occupancy',
    'specializations': 'specializations',
    'equipment': 'equipment',
}


def to_model_fields(validated: dict) -> dict:
    return {FIELD_MAP[k]: v for k, v in validated.items() if k in FIELD_MAP}
