"""
Department management views.

Every authenticated user may read departments; only administrators may
create, change or delete them.
"""
from __future__ import annotations

from django.db import IntegrityError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..models import Department
from ..permissions import IsAdminRole, ReadOnly
from ..realtime.broadcast import broadcast_refresh
from ..serializers.departments import DepartmentSerializer, to_model_fields
from ..services.departments import department_options, department_stats, serialize_department


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated & (ReadOnly | IsAdminRole)])
def departments(request):
    if request.method == 'GET':
        data = [serialize_department(d) for d in Department.objects.all()]
        return Response({'success': True, 'data': data})

    s = DepartmentSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    fields = to_model_fields(s.validated_data)
    if Department.objects.filter(name__iexact=fields['name']).exists():
        return Response({'success': False, 'error': 'Department name already exists'}, status=status.HTTP_400_BAD_REQUEST)
    dept = Department.objects.create(**fields)
    broadcast_refresh('departments')
    return Response({'success': True, 'data': serialize_department(dept)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated & (ReadOnly | IsAdminRole)])
def department_detail(request, department_id: int):
    dept = Department.objects.filter(id=department_id).first()
    if not dept:
        return Response({'success': False, 'error': 'Department not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        data = serialize_department(dept)
        data['staffCount'] = dept.staff.count()
        data['activePatients'] = dept.patients.filter(status='Active').count()
        return Response({'success': True, 'data': data})

    if request.method == 'DELETE':
        dept.delete()
        broadcast_refresh('departments')
        return Response({'success': True, 'data': {'id': department_id}})

    s = DepartmentSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    fields = to_model_fields(s.validated_data)
    for key, value in fields.items():
        setattr(dept, key, value)
    if dept.current_occupancy > dept.capacity:
        return Response({'success': False, 'error': 'Occupancy exceeds capacity'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        dept.save()
    except IntegrityError:
        return Response({'success': False, 'error': 'Department name already exists'}, status=status.HTTP_400_BAD_REQUEST)
    broadcast_refresh('departments')
    return Response({'success': True, 'data': serialize_department(dept)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_stats_view(request):
    return Response({'success': True, 'data': department_stats()})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def department_options_view(request):
    """Names for department pickers, with a fallback list on an empty install."""
    return Response({'success': True, 'data': department_options()})
