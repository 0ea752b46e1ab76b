from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.contrib.auth import get_user_model
from django.utils import timezone

from clinic.models import EmergencyAlert, Patient
from clinic.services import theaters as theater_svc
from clinic.services.emergency import assemble_emergency_queue

User = get_user_model()


def ot_board(now: Optional[datetime] = None) -> dict:
    """Everything the operating theater dashboard renders in one payload."""
    now = now or timezone.now()
    theater_svc.ensure_default_theaters()
    views = theater_svc.theater_views(now)
    return {
        'theaters': [v.as_dict() for v in views],
        'todaySchedule': theater_svc.todays_schedule(now),
        'emergencyQueue': assemble_emergency_queue(now),
    }


def ot_statistics(now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    theater_svc.ensure_default_theaters()
    views = theater_svc.theater_views(now)
    schedule = theater_svc.todays_schedule(now)
    queue = assemble_emergency_queue(now)

    def count(*statuses):
        return sum(1 for v in views if v.status in statuses)

    waits = [item['waitMinutes'] for item in queue]
    return {
        'totalTheaters': len(views),
        'occupiedTheaters': count(theater_svc.OCCUPIED),
        'availableTheaters': count(theater_svc.AVAILABLE),
        'bookedTheaters': count(theater_svc.BOOKED),
        'maintenanceTheaters': count(theater_svc.MAINTENANCE, theater_svc.CLEANING),
        'scheduledSurgeries': len(schedule),
        'emergencyCases': len(queue),
        'averageWaitTime': round(sum(waits) / len(waits)) if waits else 0,
        'totalPatients': Patient.objects.filter(status='Active').count(),
        'totalDoctors': User.objects.filter(role='doctor', status='ACTIVE').count(),
        'activeEmergencies': EmergencyAlert.objects.filter(status=EmergencyAlert.STATUS_ACTIVE).count(),
    }
