"""
Department token queue.

Tokens move Waiting -> Called -> In Progress -> Completed and may be
cancelled from any non-terminal status.  Status changes lock the token row
and leave a :class:`TokenTransition` behind.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, time
from typing import Iterable, Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Avg
from django.utils import timezone

from clinic.exceptions import TransitionNotAllowed
from clinic.models import Department, Patient, Token, TokenTransition
from clinic.realtime.broadcast import broadcast_refresh

logger = logging.getLogger(__name__)

PRIORITY_RANK = {'Emergency': 0, 'Urgent': 1, 'Normal': 2}
# Number shown on display screens; higher is more urgent
PRIORITY_LEVEL = {'Emergency': 3, 'Urgent': 2, 'Normal': 1}

_TRANSITIONS = {
    Token.STATUS_WAITING: [Token.STATUS_CALLED, Token.STATUS_CANCELLED],
    Token.STATUS_CALLED: [Token.STATUS_IN_PROGRESS, Token.STATUS_CANCELLED],
    Token.STATUS_IN_PROGRESS: [Token.STATUS_COMPLETED, Token.STATUS_CANCELLED],
    Token.STATUS_COMPLETED: [],
    Token.STATUS_CANCELLED: [],
}


def can_transition(current: str, new: str) -> bool:
    """Return True if a token may move from ``current`` to ``new``."""
    return new in _TRANSITIONS.get(current, [])


def sort_tokens(tokens: Iterable[Token]) -> list[Token]:
    """Emergency before Urgent before Normal, oldest first within a priority."""
    return sorted(tokens, key=lambda t: (PRIORITY_RANK.get(t.priority, len(PRIORITY_RANK)), t.created_at))


def mask_name(name: str) -> str:
    """'John Doe' -> 'J*** D***'."""
    return ' '.join(f"{part[0]}***" for part in (name or '').split())


def _start_of_day(now: datetime) -> datetime:
    return timezone.make_aware(datetime.combine(timezone.localdate(now), time.min))


def _next_token_number(department: Department, now: datetime) -> str:
    prefix = ''.join(ch for ch in department.name if ch.isalnum())[:3].upper() or 'TOK'
    issued_today = Token.objects.filter(department=department, created_at__gte=_start_of_day(now)).count()
    return f"{prefix}{timezone.localdate(now):%Y%m%d}{issued_today + 1:03d}"


def serialize_token(token: Token) -> dict:
    return {
        'id': token.id,
        'tokenNumber': token.token_number,
        'patientId': token.patient_id,
        'patientName': token.patient_name,
        'displayName': token.display_name,
        'departmentId': token.department_id,
        'departmentName': token.department_name,
        'status': token.status,
        'priority': token.priority,
        'estimatedWaitTime': token.estimated_wait_time,
        'actualWaitTime': token.actual_wait_time,
        'createdAt': token.created_at,
        'calledAt': token.called_at,
        'completedAt': token.completed_at,
    }


def serialize_public_token(token: Token) -> dict:
    """Token row for unauthenticated screens: masked name only."""
    data = serialize_token(token)
    del data['patientId'], data['patientName']
    return data


def create_token(*, patient_id, department_id, priority: str = 'Normal', operator=None) -> Token:
    from rest_framework.exceptions import NotFound
    patient = Patient.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    now = timezone.now()
    with transaction.atomic():
        # the department row serialises numbering for that department
        department = Department.objects.select_for_update().filter(id=department_id).first()
        if department is None:
            raise NotFound('Department not found')
        active = Token.objects.filter(department=department, status__in=Token.ACTIVE_STATUSES).count()
        per_patient = settings.TOKEN_MINUTES_PER_PATIENT
        token = Token.objects.create(
            token_number=_next_token_number(department, now),
            patient=patient,
            patient_name=patient.name,
            display_name=mask_name(patient.name),
            department=department,
            department_name=department.name,
            priority=priority or 'Normal',
            estimated_wait_time=max(per_patient, active * per_patient),
        )
        if not token.display_name:
            token.display_name = f"T{token.token_number}"
            token.save(update_fields=['display_name'])
        TokenTransition.objects.create(
            token=token, from_status=None, to_status=token.status,
            operator=operator if getattr(operator, 'pk', None) else None, reason='Token issued',
        )
    logger.info('Token %s issued for patient %s in %s', token.token_number, patient.id, department.name)
    broadcast_refresh('tokens')
    return token


def list_active_tokens(department_id=None) -> list[Token]:
    qs = Token.objects.filter(status__in=Token.ACTIVE_STATUSES)
    if department_id:
        qs = qs.filter(department_id=department_id)
    return sort_tokens(qs)


def update_token_status(token_id, new_status: str, *, operator=None, reason: str = '') -> Token:
    """Move a token to ``new_status`` under a row lock.

    Raises ``TransitionNotAllowed`` when the move is not permitted, which
    includes any change to a Completed or Cancelled token.
    """
    from rest_framework.exceptions import NotFound, ValidationError
    if new_status not in dict(Token.STATUS_CHOICES):
        raise ValidationError(f'Unknown token status: {new_status}')
    now = timezone.now()
    with transaction.atomic():
        token = Token.objects.select_for_update().filter(id=token_id).first()
        if token is None:
            raise NotFound('Token not found')
        old_status = token.status
        if not can_transition(old_status, new_status):
            raise TransitionNotAllowed(f'Cannot move token from {old_status} to {new_status}')
        token.status = new_status
        if new_status == Token.STATUS_CALLED:
            token.called_at = now
        elif new_status in (Token.STATUS_COMPLETED, Token.STATUS_CANCELLED):
            token.completed_at = now
            token.actual_wait_time = max(int((now - token.created_at).total_seconds() // 60), 0)
        token.save()
        TokenTransition.objects.create(
            token=token,
            from_status=old_status,
            to_status=new_status,
            operator=operator if getattr(operator, 'pk', None) else None,
            reason=reason or 'Status update',
        )
    logger.info('Token %s: %s -> %s', token.token_number, old_status, new_status)
    broadcast_refresh('tokens')
    return token


def cancel_token(token_id, *, operator=None, reason: str = '') -> Token:
    return update_token_status(token_id, Token.STATUS_CANCELLED, operator=operator, reason=reason or 'Cancelled')


def token_stats(now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    today = Token.objects.filter(created_at__gte=_start_of_day(now))
    tokens = list(today.only('status', 'priority', 'department_name'))
    statuses = Counter(t.status for t in tokens)
    avg = today.filter(actual_wait_time__isnull=False).aggregate(v=Avg('actual_wait_time'))['v']
    return {
        'totalTokens': len(tokens),
        'waitingTokens': statuses[Token.STATUS_WAITING],
        'calledTokens': statuses[Token.STATUS_CALLED],
        'inProgressTokens': statuses[Token.STATUS_IN_PROGRESS],
        'completedTokens': statuses[Token.STATUS_COMPLETED],
        'cancelledTokens': statuses[Token.STATUS_CANCELLED],
        'averageWaitTime': round(avg) if avg is not None else 0,
        'byDepartment': dict(Counter(t.department_name for t in tokens)),
        'byPriority': dict(Counter(t.priority for t in tokens)),
    }


def department_board(department_id, public: bool = False) -> dict:
    """Current, next and remaining tokens for one department's display."""
    serialize = serialize_public_token if public else serialize_token
    tokens = list_active_tokens(department_id)
    serving = [t for t in tokens if t.status in (Token.STATUS_CALLED, Token.STATUS_IN_PROGRESS)]
    waiting = [t for t in tokens if t.status == Token.STATUS_WAITING]
    return {
        'currentToken': serialize(serving[0]) if serving else None,
        'nextToken': serialize(waiting[0]) if waiting else None,
        'queue': [serialize(t) for t in waiting[1:]],
        'totalWaiting': len(waiting),
    }
