"""
Emergency alert endpoints.

Nurses and doctors raise alerts (code blue, fire, mass casualty ...) that
are shown on the emergency displays and the theater board.  Resolving an
alert stamps ``resolved_at``.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsClinicalStaff, IsStaff, ReadOnly
from ..serializers.alerts import AlertCreateSerializer, AlertUpdateSerializer, EmergencyCaseSerializer
from ..services import emergency as emergency_svc


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | IsClinicalStaff)])
def alerts(request):
    if request.method == 'GET':
        data = [emergency_svc.serialize_alert(a) for a in emergency_svc.list_alerts()]
        return Response({'success': True, 'data': data})

    s = AlertCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    alert = emergency_svc.create_alert(
        code_type=vd['codeType'],
        location=vd['location'],
        message=vd.get('message', ''),
        priority=vd.get('priority'),
        broadcast_to=vd.get('broadcastTo'),
        created_by=request.user,
    )
    return Response({'success': True, 'data': emergency_svc.serialize_alert(alert)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH', 'DELETE'])
@permission_classes([IsClinicalStaff])
def alert_detail(request, alert_id: int):
    if request.method == 'DELETE':
        emergency_svc.delete_alert(alert_id)
        return Response({'success': True, 'data': {'id': alert_id}})

    s = AlertUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    alert = emergency_svc.update_alert(
        alert_id,
        code_type=vd.get('codeType'),
        location=vd.get('location'),
        message=vd.get('message'),
        priority=vd.get('priority'),
        status=vd.get('status'),
        broadcast_to=vd.get('broadcastTo'),
    )
    return Response({'success': True, 'data': emergency_svc.serialize_alert(alert)})


@api_view(['POST'])
@permission_classes([IsClinicalStaff])
def alert_resolve(request, alert_id: int):
    alert = emergency_svc.resolve_alert(alert_id)
    return Response({'success': True, 'data': emergency_svc.serialize_alert(alert)})


@api_view(['POST'])
@permission_classes([IsClinicalStaff])
def emergency_case(request):
    """Register an incoming emergency patient as a MEDICAL_EMERGENCY alert."""
    s = EmergencyCaseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    alert = emergency_svc.add_emergency_case(
        patient_name=vd['patientName'], condition=vd['condition'], priority=vd['priority'], created_by=request.user,
    )
    return Response({'success': True, 'data': emergency_svc.serialize_alert(alert)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsStaff])
def emergency_queue(request):
    return Response({'success': True, 'data': emergency_svc.assemble_emergency_queue()})
