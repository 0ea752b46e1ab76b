from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..models import Patient
from ..permissions import HasRole, IsStaff, ReadOnly
from ..serializers.patient import PatientCreateSerializer, PatientUpdateSerializer, VitalsSerializer
from ..services import patients as patient_svc

CanRegister = HasRole('admin', 'doctor', 'nurse', 'receptionist')
CanRecordVitals = HasRole('admin', 'doctor', 'nurse')


def _fields(vd: dict) -> dict:
    fields = {k: vd[k] for k in ('name', 'age', 'gender', 'phone', 'condition', 'status') if k in vd}
    return fields


@api_view(['GET', 'POST'])
@permission_classes([IsStaff & (ReadOnly | CanRegister)])
def patients(request):
    """List active patients (newest first, ``q`` searches name/phone) or register one."""
    if request.method == 'GET':
        q = (request.query_params.get('q') or '').strip() or None
        data = [patient_svc.serialize_patient(p) for p in patient_svc.list_patients(q)]
        return Response({'success': True, 'data': data})

    s = PatientCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_svc.create_patient(department_id=s.validated_data.get('departmentId'), **_fields(s.validated_data))
    return Response({'success': True, 'data': patient_svc.serialize_patient(patient)}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsStaff & (ReadOnly | CanRegister)])
def patient_detail(request, patient_id: int):
    if request.method == 'GET':
        patient = Patient.objects.filter(id=patient_id).first()
        if patient is None:
            return Response({'success': False, 'error': 'Patient not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response({'success': True, 'data': patient_svc.serialize_patient(patient)})

    if request.method == 'DELETE':
        # patients are never removed, only deactivated
        patient = patient_svc.deactivate_patient(patient_id)
        return Response({'success': True, 'data': patient_svc.serialize_patient(patient)})

    s = PatientUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_svc.update_patient(
        patient_id, department_id=s.validated_data.get('departmentId'), **_fields(s.validated_data)
    )
    return Response({'success': True, 'data': patient_svc.serialize_patient(patient)})


@api_view(['POST'])
@permission_classes([CanRecordVitals])
def patient_vitals(request, patient_id: int):
    s = VitalsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    patient = patient_svc.update_vitals(patient_id, s.validated_data)
    return Response({'success': True, 'data': patient_svc.serialize_patient(patient)})
