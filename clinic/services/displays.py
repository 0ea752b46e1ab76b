"""
Public information displays.

Each display renders one content type; :func:`display_data` assembles the
payload for it.  Displays report in through the heartbeat endpoint, which
keeps ``status`` and ``last_update`` current.
"""
import logging
from typing import Optional

from django.utils import timezone

from clinic.models import Department, Display, EmergencyAlert
from clinic.realtime.broadcast import broadcast_refresh
from clinic.services import inventory, tokens
from clinic.services.emergency import serialize_alert

logger = logging.getLogger(__name__)

DISPLAY_FIELDS = ('location', 'content', 'status', 'config', 'is_active')


def serialize_display(d: Display) -> dict:
    return {
        'id': d.id,
        'location': d.location,
        'content': d.content,
        'status': d.status,
        'config': d.config,
        'isActive': d.is_active,
        'lastUpdate': d.last_update,
        'createdAt': d.created_at,
    }


def create_display(**fields) -> Display:
    display = Display.objects.create(**{k: v for k, v in fields.items() if k in DISPLAY_FIELDS and v is not None})
    broadcast_refresh('displays')
    return display


def update_display(display_id, **fields) -> Display:
    from rest_framework.exceptions import NotFound
    display = Display.objects.filter(id=display_id).first()
    if display is None:
        raise NotFound('Display not found')
    for key, value in fields.items():
        if key in DISPLAY_FIELDS and value is not None:
            setattr(display, key, value)
    display.save()
    broadcast_refresh('displays')
    return display


def delete_display(display_id) -> None:
    from rest_framework.exceptions import NotFound
    deleted, _ = Display.objects.filter(id=display_id).delete()
    if not deleted:
        raise NotFound('Display not found')
    broadcast_refresh('displays')


def heartbeat(display_id, status: str = 'online') -> Display:
    from rest_framework.exceptions import NotFound
    display = Display.objects.filter(id=display_id).first()
    if display is None:
        raise NotFound('Display not found')
    display.status = status or 'online'
    display.last_update = timezone.now()
    display.save(update_fields=['status', 'last_update'])
    logger.debug('Display %s heartbeat (%s)', display.id, display.status)
    return display


def config_department_id(config) -> Optional[int]:
    """The ``departmentId`` of a display config as an int, or None if it is not one."""
    value = (config or {}).get('departmentId')
    if isinstance(value, bool):
        return None
    try:
        department_id = int(value)
    except (TypeError, ValueError):
        return None
    return department_id if department_id > 0 else None


def _token_queue(limit=20):
    rows = []
    for t in tokens.list_active_tokens()[:limit]:
        row = tokens.serialize_public_token(t)
        row['priorityLevel'] = tokens.PRIORITY_LEVEL.get(t.priority, 1)
        rows.append(row)
    return rows


def _department_status():
    return [{
        'id': d.id,
        'name': d.name,
        'status': d.status,
        'capacity': d.capacity,
        'currentOccupancy': d.current_occupancy,
        'location': d.location,
    } for d in Department.objects.all()]


def _active_alerts(limit=10):
    qs = EmergencyAlert.objects.filter(status=EmergencyAlert.STATUS_ACTIVE).order_by('priority', '-created_at')
    return [serialize_alert(a) for a in qs[:limit]]


def _blood_bank():
    return {
        'units': [inventory.serialize_blood_unit(u) for u in inventory.list_blood_units()],
        'stats': inventory.blood_bank_stats(),
    }


def display_data(display: Display) -> dict:
    content = display.content
    config = display.config or {}
    data = {'display': serialize_display(display), 'content': content, 'generatedAt': timezone.now()}

    if content == 'Token Queue':
        data['tokens'] = _token_queue()
    elif content == 'Department Token Queue':
        department_id = config_department_id(config)
        if department_id:
            data['board'] = tokens.department_board(department_id, public=True)
            data['department'] = Department.objects.filter(id=department_id).values_list('name', flat=True).first()
        else:
            data['board'] = None
    elif content == 'Department Status':
        data['departments'] = _department_status()
    elif content == 'Emergency Alerts':
        data['alerts'] = _active_alerts()
    elif content == 'Drug Inventory':
        data['drugs'] = [inventory.serialize_drug(d) for d in inventory.low_stock_drugs()]
    elif content == 'Blood Bank':
        data['bloodBank'] = _blood_bank()
    elif content == 'Mixed Dashboard':
        data['tokens'] = _token_queue(limit=10)
        data['alerts'] = _active_alerts(limit=5)
        data['departments'] = _department_status()
    return data
