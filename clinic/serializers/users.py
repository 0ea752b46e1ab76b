import bleach
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from clinic.models import User


def _clean(v):
    return bleach.clean((v or '').strip(), strip=True)


class UserSerializer(serializers.Serializer):
    username = serializers.RegexField(r'^[\w.@+-]+$', max_length=150)
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, trim_whitespace=False, write_only=True)
    role = serializers.ChoiceField(choices=[r[0] for r in User.ROLE_CHOICES])
    departmentId = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.ChoiceField(choices=[s[0] for s in User.STATUS_CHOICES], required=False)

    def validate_name(self, v):
        v = _clean(v)
        if not v:
            raise serializers.ValidationError('Name is required')
        return v

    def validate_password(self, v):
        if v:
            validate_password(v)
        return v

    def to_service_kwargs(self) -> dict:
        vd = dict(self.validated_data)
        kwargs = {}
        if 'name' in vd:
            first, _, last = vd.pop('name').partition(' ')
            kwargs['first_name'], kwargs['last_name'] = first, last.strip()
        mapping = {'username': 'username', 'email': 'email', 'password': 'password', 'role': 'role',
                   'departmentId': 'department_id', 'status': 'status'}
        kwargs.update({mapping[k]: v for k, v in vd.items() if k in mapping})
        return kwargs


class UserUpdateSerializer(UserSerializer):
    # usernames are fixed once created
    username = None
    name = serializers.CharField(max_length=150, required=False)
    role = serializers.ChoiceField(choices=[r[0] for r in User.ROLE_CHOICES], required=False)
