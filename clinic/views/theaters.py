"""
Operating theater endpoints.

Reads derive each theater's display status from the stored row and the
clock (see :mod:`clinic.services.theaters`).  Writes go through the
services, which lock the theater row while a surgery is being booked.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import HasRole, IsClinicalStaff, IsStaff, ReadOnly
from ..realtime.broadcast import broadcast_refresh
from ..serializers.ot import (
    ConflictCheckSerializer,
    ScheduleSurgerySerializer,
    TheaterCreateSerializer,
    TheaterUpdateSerializer,
)
from ..services import surgery as surgery_svc
from ..services import theaters as theater_svc
from ..services.ot_board import ot_board, ot_statistics

CanSchedule = HasRole('admin', 'doctor')


def _booking_payload(b) -> dict:
    return {
        'id': b.id,
        'theaterId': b.theater_id,
        'patientId': b.patient_id,
        'patientName': b.patient.name,
        'procedure': b.procedure,
        'surgeon': b.surgeon_names,
        'priority': b.priority,
        'notes': b.notes,
        'startTime': b.start_time,
        'endTime': b.end_time,
        'status': b.status,
        'appointmentId': b.appointment_id,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | IsClinicalStaff)])
def theaters(request):
    """``GET`` derived status of every theater; ``POST`` adds a theater."""
    if request.method == 'GET':
        theater_svc.ensure_default_theaters()
        views = theater_svc.theater_views()
        return Response({'success': True, 'data': [v.as_dict() for v in views]})

    s = TheaterCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    theater = theater_svc.create_theater(s.validated_data['id'], s.validated_data.get('name', ''))
    broadcast_refresh('theaters', 'ot-board')
    return Response(
        {'success': True, 'data': {'id': theater.id, 'name': theater.display_name, 'status': theater.status}},
        status=status.HTTP_201_CREATED,
    )


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsClinicalStaff])
def theater_detail(request, theater_id: str):
    if request.method == 'DELETE':
        theater_svc.delete_theater(theater_id)
        broadcast_refresh('theaters', 'ot-board')
        return Response({'success': True, 'data': {'id': theater_id}})

    s = TheaterUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    theater = theater_svc.update_theater(
        theater_id, name=s.validated_data.get('name'), status=s.validated_data.get('status')
    )
    broadcast_refresh('theaters', 'ot-board')
    return Response({'success': True, 'data': {
        'id': theater.id,
        'name': theater.display_name,
        'status': theater.status,
        'estimatedEnd': theater.estimated_end,
    }})


@api_view(['POST'])
@permission_classes([IsStaff])
def check_conflict(request):
    """Would the proposed slot overlap anything already in the theater?"""
    s = ConflictCheckSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    has_conflict = surgery_svc.check_conflict(vd['theaterId'], vd['scheduledTime'], vd.get('estimatedDuration'))
    return Response({'success': True, 'data': {'hasConflict': has_conflict}})


@api_view(['POST'])
@permission_classes([CanSchedule])
def schedule_surgery(request):
    s = ScheduleSurgerySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    booking = surgery_svc.schedule_surgery(
        patient_id=vd['patientId'],
        procedure=vd['procedure'],
        theater_id=vd['theaterId'],
        scheduled_time=vd['scheduledTime'],
        estimated_duration=vd.get('estimatedDuration'),
        surgeon_id=vd.get('surgeonId'),
        surgeon_ids=vd.get('surgeonIds'),
        priority=vd.get('priority') or 'normal',
        notes=vd.get('notes', ''),
    )
    broadcast_refresh('theaters', 'ot-board', 'appointments')
    return Response({'success': True, 'data': _booking_payload(booking)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsStaff])
def surgery_list(request):
    theater_id = request.query_params.get('theaterId') or None
    include_cancelled = (request.query_params.get('includeCancelled') or '0') in ('1', 'true', 'True')
    bookings = surgery_svc.list_bookings(theater_id, include_cancelled=include_cancelled)[:200]
    return Response({'success': True, 'data': [_booking_payload(b) for b in bookings]})


@api_view(['POST'])
@permission_classes([CanSchedule])
def surgery_cancel(request, booking_id: int):
    booking = surgery_svc.cancel_booking(booking_id)
    broadcast_refresh('theaters', 'ot-board', 'appointments')
    return Response({'success': True, 'data': _booking_payload(booking)})


@api_view(['GET'])
@permission_classes([IsStaff])
def board(request):
    return Response({'success': True, 'data': ot_board()})


@api_view(['GET'])
@permission_classes([IsStaff])
def stats(request):
    return Response({'success': True, 'data': ot_statistics()})
