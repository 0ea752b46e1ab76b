"""
Token queue endpoints.

Reception issues a token when a patient arrives at a department; staff
then call, start and complete it.  Every status change is validated
against the transition table and recorded as a ``TokenTransition``.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from ..models import Token
from ..permissions import HasRole, IsStaff, ReadOnly
from ..serializers.tokens import TokenCreateSerializer, TokenStatusSerializer
from ..services import tokens as token_svc

CanManageTokens = HasRole('admin', 'doctor', 'nurse', 'receptionist')


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanManageTokens)])
def tokens(request):
    """``GET`` active tokens in service order, ``POST`` issues a token.

    ``departmentId`` narrows the list to one department.
    """
    if request.method == 'GET':
        dept = request.query_params.get('departmentId')
        if dept and not dept.isdigit():
            return Response({'success': False, 'error': 'Invalid departmentId'}, status=status.HTTP_400_BAD_REQUEST)
        rows = token_svc.list_active_tokens(int(dept) if dept else None)
        return Response({'success': True, 'data': [token_svc.serialize_token(t) for t in rows]})

    s = TokenCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    token = token_svc.create_token(
        patient_id=vd['patientId'], department_id=vd['departmentId'], priority=vd['priority'], operator=request.user,
    )
    return Response({'success': True, 'data': token_svc.serialize_token(token)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([CanManageTokens])
def token_update_status(request, token_id: int):
    s = TokenStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    token = token_svc.update_token_status(
        token_id, s.validated_data['status'], operator=request.user, reason=s.validated_data.get('reason', ''),
    )
    return Response({'success': True, 'data': token_svc.serialize_token(token)})


@api_view(['POST'])
@permission_classes([CanManageTokens])
def token_cancel(request, token_id: int):
    token = token_svc.cancel_token(token_id, operator=request.user, reason=request.data.get('reason') or '')
    return Response({'success': True, 'data': token_svc.serialize_token(token)})


@api_view(['GET'])
@permission_classes([IsStaff])
def token_detail(request, token_id: int):
    token = Token.objects.filter(id=token_id).first()
    if token is None:
        return Response({'success': False, 'error': 'Token not found'}, status=status.HTTP_404_NOT_FOUND)
    data = token_svc.serialize_token(token)
    data['transitionHistory'] = [
        {
            'from': t.from_status,
            'to': t.to_status,
            'operator': t.operator.username if t.operator else '',
            'timestamp': t.timestamp,
            'reason': t.reason,
        }
        for t in token.transitions.select_related('operator').order_by('timestamp', 'id')
    ]
    return Response({'success': True, 'data': data})


@api_view(['GET'])
@permission_classes([IsStaff])
def token_stats(request):
    return Response({'success': True, 'data': token_svc.token_stats()})


@api_view(['GET'])
@permission_classes([AllowAny])
def department_token_board(request, department_id: int):
    """Public board for a department's waiting-room screen (masked names only)."""
    return Response({'success': True, 'data': token_svc.department_board(department_id, public=True)})
