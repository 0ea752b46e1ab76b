"""
Prescription and pharmacy dashboard endpoints.
"""
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import HasRole, IsStaff, ReadOnly
from ..serializers.prescriptions import DispenseSerializer, PrescriptionCreateSerializer
from ..services import prescriptions as prescription_svc

CanPrescribe = HasRole('admin', 'doctor')
CanDispense = HasRole('admin', 'pharmacist')


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanPrescribe)])
def prescriptions(request):
    if request.method == 'GET':
        rows = prescription_svc.list_prescriptions(
            status=request.query_params.get('status'),
            patient_id=request.query_params.get('patientId'),
        )
        return Response({'success': True, 'data': [prescription_svc.serialize_prescription(p) for p in rows]})

    s = PrescriptionCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    data = s.validated_data
    prescription = prescription_svc.create_prescription(
        patient_id=data['patientId'],
        medications=data['medications'],
        doctor=request.user,
        notes=data.get('notes', ''),
    )
    return Response(
        {'success': True, 'data': prescription_svc.serialize_prescription(prescription)},
        status=status.HTTP_201_CREATED,
    )


@api_view(['POST'])
@permission_classes([CanDispense])
def prescription_process(request, prescription_id: int):
    s = DispenseSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    prescription = prescription_svc.process_prescription(prescription_id, s.validated_data['dispensed'])
    return Response({'success': True, 'data': prescription_svc.serialize_prescription(prescription)})


@api_view(['POST'])
@permission_classes([CanDispense])
def prescription_complete(request, prescription_id: int):
    prescription = prescription_svc.complete_prescription(prescription_id)
    return Response({'success': True, 'data': prescription_svc.serialize_prescription(prescription)})


@api_view(['GET'])
@permission_classes([IsStaff])
def pharmacy_stats(request):
    data = prescription_svc.pharmacy_statistics()
    data['topMedications'] = prescription_svc.top_medications()
    data['trends'] = prescription_svc.prescription_trends()
    return Response({'success': True, 'data': data})
