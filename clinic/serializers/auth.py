from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField(required=False, allow_blank=True)
    account = serializers.CharField(required=False, allow_blank=True)
    password = serializers.CharField(trim_whitespace=False)
    # Accepted for older clients; the stored role is always used
    role = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        username = (attrs.get('username') or attrs.get('account') or '').strip()
        if not username:
            raise serializers.ValidationError({'username': ['Username is required']})
        attrs['username'] = username
        return attrs

    def validate_password(self, v):
        if not v:
            raise serializers.ValidationError('Password is required')
        return v
