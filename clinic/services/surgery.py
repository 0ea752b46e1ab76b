"""Surgery booking and theater conflict checks."""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Iterable, Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic.exceptions import Conflict
from clinic.models import Appointment, Patient, SurgeryBooking, Theater
from clinic.services.theaters import refresh_theater_occupant

logger = logging.getLogger(__name__)
User = get_user_model()

_LEADING_NUMBER = re.compile(r'^\s*([+-]?\d+(?:\.\d+)?)')


def parse_duration_hours(text) -> float:
    """Read the leading number of a free-text duration ("1.5 hours" -> 1.5).

    Anything unparsable, zero or negative falls back to the default
    duration without raising; longer values are capped at
    ``OT_MAX_DURATION_HOURS``.
    """
    default = float(settings.OT_DEFAULT_DURATION_HOURS)
    if not isinstance(text, (int, float)):
        match = _LEADING_NUMBER.match(str(text or ''))
        if not match:
            return default
        text = match.group(1)
    try:
        value = float(text)
    except OverflowError:
        # ints too large for a float
        value = float('inf') if text > 0 else 0.0
    if not value > 0:
        return default
    return min(value, float(settings.OT_MAX_DURATION_HOURS))


def surgery_end(start: datetime, estimated_duration) -> datetime:
    from rest_framework.exceptions import ValidationError
    try:
        return start + timedelta(hours=parse_duration_hours(estimated_duration))
    except OverflowError:
        raise ValidationError('Scheduled time is out of range')


def intervals_overlap(existing_start: datetime, existing_end: datetime,
                      new_start: datetime, new_end: datetime) -> bool:
    # Inclusive at both ends: back-to-back slots conflict
    return (
        (existing_start <= new_start <= existing_end)
        or (existing_start <= new_end <= existing_end)
        or (new_start <= existing_start and new_end >= existing_end)
    )


def _has_conflict(theater: Theater, start: datetime, end: datetime,
                  exclude_booking_id: Optional[int] = None) -> bool:
    blocking = theater.has_occupant or theater.status in (Theater.STATUS_MAINTENANCE, Theater.STATUS_CLEANING)
    if blocking and intervals_overlap(theater.start_time, theater.estimated_end, start, end):
        return True
    # Same inclusive test as intervals_overlap, written as two comparisons
    qs = SurgeryBooking.objects.filter(
        theater=theater, status='Scheduled', start_time__lte=end, end_time__gte=start
    )
    if exclude_booking_id is not None:
        qs = qs.exclude(id=exclude_booking_id)
    return qs.exists()


def check_conflict(theater_id: str, proposed_start: datetime, estimated_duration) -> bool:
    """Return True if the proposed slot overlaps anything booked in the theater."""
    end = surgery_end(proposed_start, estimated_duration)
    theater = Theater.objects.filter(id=theater_id).first()
    if theater is None:
        return False
    return _has_conflict(theater, proposed_start, end)


def _resolve_surgeons(surgeon_id, surgeon_ids: Optional[Iterable[int]]):
    from rest_framework.exceptions import ValidationError
    surgeon = User.objects.filter(id=surgeon_id).first() if surgeon_id else None
    if surgeon is None:
        surgeon = User.objects.filter(role='doctor', status='ACTIVE').order_by('id').first()
    if surgeon is None:
        raise ValidationError('No surgeons available')

    names = surgeon.display_name
    ids = list(surgeon_ids or [])
    if len(ids) > 1:
        team = User.objects.filter(id__in=ids).order_by('id')
        joined = ', '.join(u.display_name for u in team)
        names = joined or names
    return surgeon, names


def schedule_surgery(*, patient_id, procedure: str, theater_id: str, scheduled_time: datetime,
                     estimated_duration, surgeon_id=None, surgeon_ids=None,
                     priority: str = 'normal', notes: str = '') -> SurgeryBooking:
    """Book a surgery slot.

    The theater row is locked for the whole transaction and the conflict
    check is repeated under the lock, so two concurrent requests for
    overlapping slots cannot both succeed.  Raises ``Conflict`` (409) on
    overlap.
    """
    from rest_framework.exceptions import NotFound
    patient = Patient.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    surgeon, surgeon_names = _resolve_surgeons(surgeon_id, surgeon_ids)

    start = scheduled_time
    end = surgery_end(start, estimated_duration)
    now = timezone.now()

    with transaction.atomic():
        Theater.objects.get_or_create(id=theater_id, defaults={'start_time': now, 'estimated_end': now})
        theater = Theater.objects.select_for_update().get(id=theater_id)
        if _has_conflict(theater, start, end):
            logger.info('Theater %s: rejected %s..%s, slot taken', theater_id, start, end)
            raise Conflict('Scheduling conflict: the theater is already booked for that time')

        note_text = f"Surgery: {procedure} - Priority: {priority}"
        if notes:
            note_text += f" - {notes}"
        appointment = Appointment.objects.create(
            patient=patient,
            doctor=surgeon,
            date=start,
            time=timezone.localtime(start).strftime('%I:%M %p'),
            type='EMERGENCY',
            status='Scheduled',
            notes=note_text,
        )
        booking = SurgeryBooking.objects.create(
            theater=theater,
            patient=patient,
            surgeon=surgeon,
            surgeon_names=surgeon_names,
            procedure=procedure,
            priority=priority,
            notes=notes,
            start_time=start,
            end_time=end,
            appointment=appointment,
        )
        # an earlier unfinished occupant keeps the theater until it ends
        shows_earlier = theater.has_occupant and theater.estimated_end >= now and theater.start_time < start
        if not shows_earlier:
            refresh_theater_occupant(theater, now)

    logger.info('Theater %s: booked %s for patient %s at %s', theater_id, procedure, patient.id, start)
    return booking


def cancel_booking(booking_id) -> SurgeryBooking:
    from rest_framework.exceptions import NotFound
    from clinic.exceptions import TransitionNotAllowed
    now = timezone.now()
    with transaction.atomic():
        booking = SurgeryBooking.objects.select_for_update().select_related('patient').filter(id=booking_id).first()
        if booking is None:
            raise NotFound('Booking not found')
        if booking.status != 'Scheduled':
            raise TransitionNotAllowed(f'Booking is already {booking.status}')
        theater = Theater.objects.select_for_update().get(id=booking.theater_id)
        booking.status = 'Cancelled'
        booking.save(update_fields=['status'])
        if booking.appointment_id:
            Appointment.objects.filter(id=booking.appointment_id).update(status='Cancelled')
        shows_booking = (
            theater.start_time == booking.start_time and theater.patient_name == booking.patient.name
        )
        if shows_booking:
            refresh_theater_occupant(theater, now)
    logger.info('Theater %s: booking %s cancelled', booking.theater_id, booking.id)
    return booking


def list_bookings(theater_id: Optional[str] = None, include_cancelled: bool = False):
    qs = SurgeryBooking.objects.select_related('patient').order_by('start_time')
    if theater_id:
        qs = qs.filter(theater_id=theater_id)
    if not include_cancelled:
        qs = qs.exclude(status='Cancelled')
    return qs
