"""
Operating theater status.

A theater row stores a lifecycle label plus the interval of its current (or
next) occupant.  What the dashboards display is derived from that row and
the wall clock on every read:

* ``Maintenance``/``Cleaning`` hold until ``estimated_end`` has passed.
* ``Scheduled``/``In Progress`` rows with an occupant are ``occupied`` inside
  their interval, ``booked`` before it and ``available`` after it.

When the derived state disagrees with storage (a booked slot has started,
or an interval has expired) the correction is written back best-effort.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic.models import SurgeryBooking, Theater

logger = logging.getLogger(__name__)

AVAILABLE = 'available'
OCCUPIED = 'occupied'
BOOKED = 'booked'
MAINTENANCE = 'maintenance'
CLEANING = 'cleaning'

DEFAULT_THEATERS = ('OT-001', 'OT-002', 'OT-003', 'OT-004')


def format_clock(dt: datetime) -> str:
    return timezone.localtime(dt).strftime('%I:%M %p')


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60}h {minutes % 60}m"


@dataclass
class TheaterView:
    id: str
    name: str
    status: str
    current_surgery: Optional[dict] = None
    next_surgery: Optional[dict] = None
    last_cleaned: Optional[str] = None
    maintenance_type: Optional[str] = None
    estimated_completion: Optional[str] = None
    # stored status the row should move to, if it is stale
    correction: Optional[str] = field(default=None, repr=False)

    def as_dict(self) -> dict:
        data = {'id': self.id, 'name': self.name, 'status': self.status}
        if self.current_surgery:
            data['currentSurgery'] = self.current_surgery
        if self.next_surgery:
            data['nextSurgery'] = self.next_surgery
        if self.last_cleaned:
            data['lastCleaned'] = self.last_cleaned
        if self.maintenance_type:
            data['maintenanceType'] = self.maintenance_type
        if self.estimated_completion:
            data['estimatedCompletion'] = self.estimated_completion
        return data


def derive_theater_status(theater: Theater, now: datetime) -> TheaterView:
    """Compute the display status of ``theater`` at ``now``.

    Pure: nothing is written.  ``TheaterView.correction`` carries the stored
    status the row should be moved to when it has gone stale.
    """
    start = theater.start_time
    end = theater.estimated_end
    label = theater.status
    busy_labels = (Theater.STATUS_SCHEDULED, Theater.STATUS_IN_PROGRESS)
    correction = None

    if label == Theater.STATUS_MAINTENANCE:
        status = MAINTENANCE if now <= end else AVAILABLE
    elif label == Theater.STATUS_CLEANING:
        status = CLEANING if now <= end else AVAILABLE
    elif label in busy_labels and theater.has_occupant and start <= now <= end:
        status = OCCUPIED
    elif label == Theater.STATUS_SCHEDULED and theater.has_occupant and now < start:
        status = BOOKED
    else:
        status = AVAILABLE

    if status == OCCUPIED and label == Theater.STATUS_SCHEDULED:
        correction = Theater.STATUS_IN_PROGRESS
    elif status == AVAILABLE and label != Theater.STATUS_AVAILABLE and now > end:
        correction = Theater.STATUS_AVAILABLE

    view = TheaterView(id=theater.id, name=theater.display_name, status=status, correction=correction)

    total = int((end - start).total_seconds() // 60)
    if status == OCCUPIED:
        elapsed = int((now - start).total_seconds() // 60)
        progress = min(int(elapsed * 100 // total), 100) if total > 0 else 0
        view.current_surgery = {
            'patient': theater.patient_name,
            'procedure': theater.procedure,
            'surgeon': theater.surgeon,
            'startTime': format_clock(start),
            'estimatedDuration': format_minutes(total),
            'elapsed': format_minutes(elapsed),
            'elapsedMinutes': elapsed,
            'progress': progress,
        }
    elif status == BOOKED:
        view.next_surgery = {
            'patient': theater.patient_name,
            'procedure': theater.procedure,
            'scheduledTime': timezone.localtime(start).strftime('%d %b, %I:%M %p'),
        }
    elif status == AVAILABLE:
        view.last_cleaned = 'Recently cleaned'

    if status == MAINTENANCE:
        view.maintenance_type = 'Equipment Check'
    if status in (MAINTENANCE, CLEANING):
        view.estimated_completion = format_clock(end)
    return view


def _clear_occupant(theater: Theater, now: datetime) -> None:
    theater.status = Theater.STATUS_AVAILABLE
    theater.patient_name = ''
    theater.procedure = Theater.IDLE_PROCEDURE
    theater.surgeon = ''
    theater.progress = 0
    if theater.estimated_end > now:
        theater.estimated_end = now
    if theater.start_time > theater.estimated_end:
        theater.start_time = theater.estimated_end


def refresh_theater_occupant(theater: Theater, now: Optional[datetime] = None) -> Theater:
    """Load the earliest unfinished booking into the theater's occupant fields.

    Clears the occupant (status Available) when no booking is left.  An open
    Maintenance or Cleaning window is left alone.  The caller is expected to
    hold the row lock.
    """
    now = now or timezone.now()
    in_window = theater.status in (Theater.STATUS_MAINTENANCE, Theater.STATUS_CLEANING)
    if in_window and theater.estimated_end >= now:
        return theater
    upcoming = (
        theater.bookings.filter(status='Scheduled', end_time__gte=now)
        .select_related('patient')
        .order_by('start_time')
        .first()
    )
    if upcoming is None:
        _clear_occupant(theater, now)
    else:
        theater.patient_name = upcoming.patient.name
        theater.procedure = upcoming.procedure
        theater.surgeon = upcoming.surgeon_names
        theater.start_time = upcoming.start_time
        theater.estimated_end = upcoming.end_time
        theater.progress = 0
        theater.status = (
            Theater.STATUS_IN_PROGRESS if upcoming.start_time <= now else Theater.STATUS_SCHEDULED
        )
    theater.save()
    return theater


def apply_status_correction(theater: Theater, status: str, now: Optional[datetime] = None) -> bool:
    """Write a derived status back to storage.

    Only touches the row if it still holds the label and interval the
    status was derived from, so a booking committed in the meantime is not
    overwritten.  Failures are logged and reported as ``False``.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            locked = (
                Theater.objects.select_for_update()
                .filter(pk=theater.pk, status=theater.status, estimated_end=theater.estimated_end)
                .first()
            )
            if locked is None:
                return False
            if status == Theater.STATUS_AVAILABLE:
                SurgeryBooking.objects.filter(
                    theater=locked, status='Scheduled', end_time__lt=now
                ).update(status='Completed')
                refresh_theater_occupant(locked, now)
            else:
                locked.status = status
                locked.save(update_fields=['status', 'updated_at'])
    except Exception:
        logger.exception('Theater %s: status write-back to %r failed', theater.pk, status)
        return False
    logger.info('Theater %s: stored status %r -> %r', theater.pk, theater.status, status)
    return True


def theater_views(now: Optional[datetime] = None, *, writeback: Optional[bool] = None) -> list[TheaterView]:
    """Derive every theater; optionally write stale statuses back."""
    now = now or timezone.now()
    if writeback is None:
        writeback = settings.OT_WRITEBACK_ON_READ
    views = []
    for theater in Theater.objects.all():
        view = derive_theater_status(theater, now)
        if writeback and view.correction:
            apply_status_correction(theater, view.correction, now)
        views.append(view)
    return views


def sync_theater_status(now: Optional[datetime] = None) -> int:
    """Apply every pending status correction; returns the number applied."""
    now = now or timezone.now()
    applied = 0
    for theater in Theater.objects.all():
        view = derive_theater_status(theater, now)
        if view.correction and apply_status_correction(theater, view.correction, now):
            applied += 1
    return applied


def ensure_default_theaters() -> int:
    """Seed OT-001..OT-004 on an empty table; returns the number created."""
    if Theater.objects.exists():
        return 0
    now = timezone.now()
    rows = []
    for theater_id in DEFAULT_THEATERS:
        row = Theater(id=theater_id, start_time=now, estimated_end=now)
        if theater_id == 'OT-003':
            row.status = Theater.STATUS_MAINTENANCE
            row.procedure = Theater.STATUS_MAINTENANCE
            row.estimated_end = now + timedelta(minutes=settings.OT_MAINTENANCE_MINUTES)
        rows.append(row)
    Theater.objects.bulk_create(rows, ignore_conflicts=True)
    return len(rows)


def _window_for(status: str, now: datetime) -> Optional[datetime]:
    if status == Theater.STATUS_MAINTENANCE:
        return now + timedelta(minutes=settings.OT_MAINTENANCE_MINUTES)
    if status == Theater.STATUS_CLEANING:
        return now + timedelta(minutes=settings.OT_CLEANING_MINUTES)
    return None


def create_theater(theater_id: str, name: str = '') -> Theater:
    from rest_framework.exceptions import ValidationError
    if Theater.objects.filter(id=theater_id).exists():
        raise ValidationError(f'Theater {theater_id} already exists')
    now = timezone.now()
    return Theater.objects.create(id=theater_id, name=name, start_time=now, estimated_end=now)


def update_theater(theater_id: str, *, name: Optional[str] = None, status: Optional[str] = None) -> Theater:
    """Rename a theater and/or move it to another lifecycle status.

    Maintenance and Cleaning open a window that ends after the configured
    number of minutes; Available clears the occupant.
    """
    from rest_framework.exceptions import NotFound
    now = timezone.now()
    with transaction.atomic():
        theater = Theater.objects.select_for_update().filter(id=theater_id).first()
        if theater is None:
            raise NotFound('Theater not found')
        if name is not None:
            theater.name = name
        if status:
            window_end = _window_for(status, now)
            if window_end is not None:
                theater.status = status
                theater.start_time = now
                theater.estimated_end = window_end
            elif status == Theater.STATUS_AVAILABLE:
                _clear_occupant(theater, now)
            else:
                theater.status = status
        theater.save()
    return theater


def delete_theater(theater_id: str) -> None:
    from rest_framework.exceptions import NotFound
    deleted, _ = Theater.objects.filter(id=theater_id).delete()
    if not deleted:
        raise NotFound('Theater not found')


def todays_schedule(now: Optional[datetime] = None) -> list[dict]:
    """Surgeries starting today (local time), in start order."""
    now = now or timezone.now()
    today = timezone.localdate(now)
    rows = []
    seen = set()
    bookings = (
        SurgeryBooking.objects.exclude(status='Cancelled')
        .filter(start_time__date=today)
        .select_related('patient')
        .order_by('start_time')
    )
    for b in bookings:
        seen.add((b.theater_id, b.start_time))
        rows.append((b.start_time, b.end_time, b.patient.name, b.procedure, b.surgeon_names, b.theater_id, b.id))
    for t in Theater.objects.all():
        if t.has_occupant and (t.id, t.start_time) not in seen and timezone.localdate(t.start_time) == today:
            rows.append((t.start_time, t.estimated_end, t.patient_name, t.procedure, t.surgeon, t.id, t.id))
    rows.sort(key=lambda r: r[0])

    schedule = []
    for start, end, patient, procedure, surgeon, theater_id, row_id in rows:
        if start <= now <= end:
            state = 'in-progress'
        elif now > end:
            state = 'completed'
        else:
            state = 'scheduled'
        schedule.append({
            'id': str(row_id),
            'time': format_clock(start),
            'duration': f"{int((end - start).total_seconds() // 3600)}h",
            'patient': patient,
            'procedure': procedure,
            'surgeon': surgeon,
            'theater': theater_id,
            'status': state,
        })
    return schedule
