from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..models import Display
from ..permissions import HasRole, IsStaff, ReadOnly
from ..serializers.displays import DisplaySerializer, HeartbeatSerializer
from ..services import displays as display_svc
from ..throttling import HeartbeatRateThrottle

CanManageDisplays = HasRole('admin', 'technician')


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanManageDisplays)])
def displays(request):
    if request.method == 'GET':
        rows = [display_svc.serialize_display(d) for d in Display.objects.order_by('location', 'id')]
        return Response({'success': True, 'data': rows})

    s = DisplaySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    display = display_svc.create_display(**s.to_model_fields())
    return Response({'success': True, 'data': display_svc.serialize_display(display)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([CanManageDisplays])
def display_detail(request, display_id: int):
    if request.method == 'DELETE':
        display_svc.delete_display(display_id)
        return Response({'success': True, 'data': {'id': display_id}})

    stored = Display.objects.filter(id=display_id).first()
    s = DisplaySerializer(stored, data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    display = display_svc.update_display(display_id, **s.to_model_fields())
    return Response({'success': True, 'data': display_svc.serialize_display(display)})


@api_view(['GET'])
@permission_classes([AllowAny])
def display_data(request, display_id: int):
    """Content for a screen; public because displays run unattended."""
    display = Display.objects.filter(id=display_id, is_active=True).first()
    if display is None:
        return Response({'success': False, 'error': 'Display not found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'success': True, 'data': display_svc.display_data(display)})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([HeartbeatRateThrottle])
def heartbeat(request):
    s = HeartbeatSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    display = display_svc.heartbeat(s.validated_data['displayId'], s.validated_data.get('status') or 'online')
    return Response({'success': True, 'data': {
        'id': display.id,
        'status': display.status,
        'lastUpdate': display.last_update,
    }})
