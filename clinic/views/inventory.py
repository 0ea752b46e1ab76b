"""
Pharmacy stock and blood bank endpoints.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import HasRole, IsStaff, ReadOnly
from ..serializers.inventory import BLOOD_FIELD_MAP, DRUG_FIELD_MAP, BloodUnitSerializer, DrugSerializer, remap
from ..services import inventory as inventory_svc

CanManageDrugs = HasRole('admin', 'pharmacist')
CanManageBlood = HasRole('admin', 'technician')


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanManageDrugs)])
def drugs(request):
    if request.method == 'GET':
        q = (request.query_params.get('q') or '').strip()
        rows = [inventory_svc.serialize_drug(d) for d in inventory_svc.list_drugs(q)]
        wanted = request.query_params.get('status')
        if wanted:
            rows = [r for r in rows if r['status'] == wanted]
        return Response({'success': True, 'data': rows})

    s = DrugSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    drug = inventory_svc.add_drug(**remap(s.validated_data, DRUG_FIELD_MAP))
    return Response({'success': True, 'data': inventory_svc.serialize_drug(drug)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH'])
@permission_classes([CanManageDrugs])
def drug_detail(request, drug_id: int):
    s = DrugSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    drug = inventory_svc.update_drug(drug_id, **remap(s.validated_data, DRUG_FIELD_MAP))
    return Response({'success': True, 'data': inventory_svc.serialize_drug(drug)})


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanManageBlood)])
def blood_units(request):
    if request.method == 'GET':
        rows = [inventory_svc.serialize_blood_unit(u) for u in inventory_svc.list_blood_units()]
        return Response({'success': True, 'data': rows})

    s = BloodUnitSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    unit = inventory_svc.add_blood_unit(**remap(s.validated_data, BLOOD_FIELD_MAP))
    return Response({'success': True, 'data': inventory_svc.serialize_blood_unit(unit)}, status=status.HTTP_201_CREATED)


@api_view(['PUT', 'PATCH'])
@permission_classes([CanManageBlood])
def blood_unit_detail(request, unit_id: int):
    s = BloodUnitSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    unit = inventory_svc.update_blood_unit(unit_id, **remap(s.validated_data, BLOOD_FIELD_MAP))
    return Response({'success': True, 'data': inventory_svc.serialize_blood_unit(unit)})


@api_view(['GET'])
@permission_classes([IsStaff])
def blood_bank_stats(request):
    return Response({'success': True, 'data': inventory_svc.blood_bank_stats()})
