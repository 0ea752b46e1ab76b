"""
User administration endpoints (administrators only).
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.users import UserSerializer, UserUpdateSerializer
from ..services import users as user_svc


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def users(request):
    if request.method == 'GET':
        rows = user_svc.list_users(
            role=request.query_params.get('role') or None,
            status=request.query_params.get('status') or None,
            q=(request.query_params.get('q') or '').strip() or None,
        )
        return Response({'success': True, 'data': [user_svc.serialize_user(u) for u in rows]})

    s = UserSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    user = user_svc.create_user(**s.to_service_kwargs())
    return Response({'success': True, 'data': user_svc.serialize_user(user)}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAdminRole])
def user_stats(request):
    return Response({'success': True, 'data': user_svc.user_stats()})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAdminRole])
def user_detail(request, user_id: int):
    if request.method == 'GET':
        return Response({'success': True, 'data': user_svc.serialize_user(user_svc.get_user(user_id))})

    if request.method == 'DELETE':
        return Response({'success': True, 'data': user_svc.delete_user(user_id, acting_user=request.user)})

    s = UserUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    user = user_svc.update_user(user_id, **s.to_service_kwargs())
    return Response({'success': True, 'data': user_svc.serialize_user(user)})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def user_toggle_status(request, user_id: int):
    user = user_svc.toggle_user_status(user_id, acting_user=request.user)
    return Response({'success': True, 'data': user_svc.serialize_user(user)})
