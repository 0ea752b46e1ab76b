import bleach
from rest_framework import serializers

from clinic.models import Display
from clinic.services.displays import config_department_id

DEPARTMENT_QUEUE = 'Department Token Queue'


class DisplaySerializer(serializers.Serializer):
    location = serializers.CharField(max_length=255)
    content = serializers.ChoiceField(choices=[c[0] for c in Display.CONTENT_CHOICES])
    status = serializers.ChoiceField(choices=['online', 'offline'], required=False)
    config = serializers.DictField(required=False)
    isActive = serializers.BooleanField(required=False)

    def validate_location(self, v):
        return bleach.clean(v.strip(), strip=True)

    def validate(self, attrs):
        # Partial updates are checked against what the display already stores
        stored = self.instance
        content = attrs.get('content', stored.content if stored else None)
        config = attrs['config'] if 'config' in attrs else (stored.config if stored else None)
        config = dict(config or {})

        given = 'departmentId' in (attrs.get('config') or {})
        if given or content == DEPARTMENT_QUEUE:
            department_id = config_department_id(config)
            if department_id is None:
                if 'departmentId' in config:
                    message = 'departmentId must be a positive integer'
                else:
                    message = 'departmentId is required for a department queue'
                raise serializers.ValidationError({'config': [message]})
            if 'config' in attrs:
                config['departmentId'] = department_id
                attrs['config'] = config
        return attrs

    def to_model_fields(self):
        vd = self.validated_data
        mapping = {'location': 'location', 'content': 'content', 'status': 'status',
                   'config': 'config', 'isActive': 'is_active'}
        return {mapping[k]: v for k, v in vd.items() if k in mapping}


class HeartbeatSerializer(serializers.Serializer):
    displayId = serializers.IntegerField()
    status = serializers.ChoiceField(choices=['online', 'offline', 'error'], required=False, default='online')
