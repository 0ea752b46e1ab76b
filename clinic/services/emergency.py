"""
Emergency alerts and the emergency queue shown on the theater board.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

from clinic.models import EmergencyAlert, Patient
from clinic.realtime.broadcast import broadcast_refresh

logger = logging.getLogger(__name__)

EMERGENCY_KEYWORDS = ('emergency', 'critical', 'urgent')
CASE_PRIORITY = {'critical': 1, 'high': 2}


def alert_severity(priority: int) -> str:
    if priority == 1:
        return 'critical'
    if priority == 2:
        return 'high'
    return 'medium'


def serialize_alert(alert: EmergencyAlert) -> dict:
    return {
        'id': alert.id,
        'codeType': alert.code_type,
        'location': alert.location,
        'message': alert.message,
        'priority': alert.priority,
        'status': alert.status,
        'broadcastTo': alert.broadcast_to,
        'createdBy': alert.created_by_id,
        'createdAt': alert.created_at,
        'resolvedAt': alert.resolved_at,
    }


def list_alerts(limit: int = 20):
    return EmergencyAlert.objects.order_by('-created_at', '-id')[:limit]


def create_alert(*, code_type: str, location: str, message: str = '', priority: Optional[int] = None,
                 broadcast_to=None, created_by=None) -> EmergencyAlert:
    alert = EmergencyAlert.objects.create(
        code_type=code_type,
        location=location,
        message=message or f"{code_type} at {location}",
        priority=priority or 3,
        broadcast_to=list(broadcast_to) if broadcast_to else ['ALL'],
        created_by=created_by if getattr(created_by, 'pk', None) else None,
    )
    logger.warning('Alert %s raised: %s at %s (p%s)', alert.id, code_type, location, alert.priority)
    broadcast_refresh('alerts', 'ot-board')
    return alert


def update_alert(alert_id, **changes) -> EmergencyAlert:
    """Apply ``changes`` (code_type, location, message, priority, status, broadcast_to)."""
    from rest_framework.exceptions import NotFound
    alert = EmergencyAlert.objects.filter(id=alert_id).first()
    if alert is None:
        raise NotFound('Alert not found')
    for field in ('code_type', 'location', 'message', 'priority', 'status', 'broadcast_to'):
        if changes.get(field) is not None:
            setattr(alert, field, changes[field])
    if changes.get('status') == EmergencyAlert.STATUS_RESOLVED and alert.resolved_at is None:
        alert.resolved_at = timezone.now()
    elif changes.get('status') == EmergencyAlert.STATUS_ACTIVE:
        alert.resolved_at = None
    alert.save()
    broadcast_refresh('alerts', 'ot-board')
    return alert


def resolve_alert(alert_id) -> EmergencyAlert:
    return update_alert(alert_id, status=EmergencyAlert.STATUS_RESOLVED)


def delete_alert(alert_id) -> None:
    from rest_framework.exceptions import NotFound
    deleted, _ = EmergencyAlert.objects.filter(id=alert_id).delete()
    if not deleted:
        raise NotFound('Alert not found')
    broadcast_refresh('alerts', 'ot-board')


def add_emergency_case(*, patient_name: str, condition: str, priority: str = 'high', created_by=None) -> EmergencyAlert:
    """Raise a MEDICAL_EMERGENCY alert for a patient arriving at the emergency department."""
    return create_alert(
        code_type='MEDICAL_EMERGENCY',
        location='Emergency Department',
        message=f"{condition} - Patient: {patient_name}",
        priority=CASE_PRIORITY.get((priority or '').lower(), 3),
        broadcast_to=['DOCTOR', 'NURSE'],
        created_by=created_by,
    )


def assemble_emergency_queue(now: Optional[datetime] = None) -> list[dict]:
    """Active alerts (most urgent first), then critical patients, capped."""
    now = now or timezone.now()
    limit = settings.EMERGENCY_QUEUE_LIMIT
    queue = []

    alerts = EmergencyAlert.objects.filter(status=EmergencyAlert.STATUS_ACTIVE).order_by('priority', 'created_at')
    for alert in alerts[:limit]:
        waited = max(int((now - alert.created_at).total_seconds() // 60), 0)
        queue.append({
            'id': f"alert-{alert.id}",
            'patient': 'Emergency Patient',
            'condition': alert.message or alert.code_type,
            'priority': alert_severity(alert.priority),
            'waitTime': f"{waited} mins",
            'waitMinutes': waited,
            'assignedTheater': None,
        })

    recent = (
        Patient.objects.filter(status='Active')
        .exclude(condition='')
        .order_by('-created_at', '-id')[:10]
    )
    matched = [p for p in recent if any(k in p.condition.lower() for k in EMERGENCY_KEYWORDS)][:3]
    for patient in matched:
        waited = max(int((now - patient.created_at).total_seconds() // 60), 0)
        queue.append({
            'id': f"patient-{patient.id}",
            'patient': patient.name,
            'condition': patient.condition,
            'priority': 'critical' if 'critical' in patient.condition.lower() else 'high',
            'waitTime': f"{waited // 60} hours",
            'waitMinutes': waited,
            'assignedTheater': None,
        })
    return queue[:limit]
