"""
Account administration.

Deleting an account that doctors' records still point at (appointments,
prescriptions) only deactivates it, so the clinical history keeps its
author.  Deactivated accounts cannot log in and their API tokens stop
working.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Optional

from django.db.models import Count, Q
from rest_framework.authtoken.models import Token

from clinic.models import Department, User
from clinic.realtime.broadcast import broadcast_refresh

logger = logging.getLogger(__name__)

USER_FIELDS = ('first_name', 'last_name', 'email', 'role', 'department', 'status')


def user_payload(user: User) -> dict:
    return {
        'id': user.id,
        'username': user.username,
        'name': user.display_name,
        'email': user.email,
        'role': user.role,
        'status': user.status,
        'department': {'id': user.department.id, 'name': user.department.name} if user.department else None,
    }


def serialize_user(user: User) -> dict:
    data = user_payload(user)
    data['createdAt'] = user.date_joined
    data['lastLogin'] = user.last_login
    # annotated by list_users / get_user
    data['appointmentCount'] = getattr(user, 'appointment_count', None)
    data['prescriptionCount'] = getattr(user, 'prescription_count', None)
    return data


def _with_counts(qs):
    return qs.select_related('department').annotate(
        appointment_count=Count('appointments', distinct=True),
        prescription_count=Count('prescriptions', distinct=True),
    )


def list_users(*, role: Optional[str] = None, status: Optional[str] = None, q: Optional[str] = None):
    qs = _with_counts(User.objects.order_by('-date_joined', '-id'))
    if role:
        qs = qs.filter(role=role)
    if status:
        qs = qs.filter(status=status)
    if q:
        qs = qs.filter(
            Q(username__icontains=q) | Q(first_name__icontains=q)
            | Q(last_name__icontains=q) | Q(email__icontains=q)
        )
    return qs


def get_user(user_id) -> User:
    from rest_framework.exceptions import NotFound
    user = _with_counts(User.objects.filter(id=user_id)).first()
    if user is None:
        raise NotFound('User not found')
    return user


def _department(department_id) -> Optional[Department]:
    from rest_framework.exceptions import ValidationError
    if not department_id:
        return None
    department = Department.objects.filter(id=department_id).first()
    if department is None:
        raise ValidationError({'departmentId': ['Department not found']})
    return department


def _check_email(email: str, exclude_id=None) -> None:
    from rest_framework.exceptions import ValidationError
    if not email:
        return
    qs = User.objects.filter(email__iexact=email)
    if exclude_id is not None:
        qs = qs.exclude(id=exclude_id)
    if qs.exists():
        raise ValidationError({'email': ['Email already exists']})


def create_user(*, username: str, role: str, first_name: str = '', last_name: str = '', email: str = '',
                password: Optional[str] = None, department_id=None) -> User:
    """Create an ACTIVE account; without a password the account cannot log in until one is set."""
    from rest_framework.exceptions import ValidationError
    if User.objects.filter(username__iexact=username).exists():
        raise ValidationError({'username': ['Username already exists']})
    _check_email(email)
    user = User(
        username=username, role=role, first_name=first_name, last_name=last_name, email=email,
        department=_department(department_id), status='ACTIVE',
    )
    if password:
        user.set_password(password)
    else:
        user.set_unusable_password()
    user.save()
    logger.info('User %s created with role %s', user.username, role)
    broadcast_refresh('users')
    return get_user(user.id)


def update_user(user_id, *, password: Optional[str] = None, **changes) -> User:
    user = get_user(user_id)
    if 'department_id' in changes:
        changes['department'] = _department(changes.pop('department_id'))
    if changes.get('email'):
        _check_email(changes['email'], exclude_id=user.id)
    for key, value in changes.items():
        if key in USER_FIELDS:
            setattr(user, key, value)
    if password:
        user.set_password(password)
    user.save()
    if user.status != 'ACTIVE':
        Token.objects.filter(user=user).delete()
    broadcast_refresh('users')
    return get_user(user.id)


def delete_user(user_id, *, acting_user=None) -> dict:
    """Delete an account, or deactivate it when clinical records reference it.

    Returns ``{'id', 'deleted', 'deactivated'}``.
    """
    from rest_framework.exceptions import ValidationError
    user = get_user(user_id)
    if acting_user is not None and acting_user.pk == user.pk:
        raise ValidationError('You cannot delete your own account')
    if user.appointment_count or user.prescription_count:
        user.status = 'INACTIVE'
        user.save(update_fields=['status'])
        Token.objects.filter(user=user).delete()
        logger.info('User %s has clinical records; deactivated instead of deleted', user.username)
        result = {'id': user_id, 'deleted': False, 'deactivated': True}
    else:
        user.delete()
        logger.info('User %s deleted', user.username)
        result = {'id': user_id, 'deleted': True, 'deactivated': False}
    broadcast_refresh('users')
    return result


def toggle_user_status(user_id, *, acting_user=None) -> User:
    from rest_framework.exceptions import ValidationError
    user = get_user(user_id)
    if acting_user is not None and acting_user.pk == user.pk:
        raise ValidationError('You cannot deactivate your own account')
    new_status = 'INACTIVE' if user.status == 'ACTIVE' else 'ACTIVE'
    return update_user(user.id, status=new_status)


def user_stats() -> dict:
    """Counts of ACTIVE accounts, overall and per role and department."""
    active = User.objects.filter(status='ACTIVE')
    by_department = Counter(
        active.filter(department__isnull=False).values_list('department__name', flat=True)
    )
    return {
        'total': active.count(),
        'inactive': User.objects.exclude(status='ACTIVE').count(),
        'byRole': dict(Counter(active.values_list('role', flat=True))),
        'byDepartment': dict(by_department),
    }
