import logging

from django.db.models import Q
from django.utils import timezone

from clinic.models import Department, Patient
from clinic.realtime.broadcast import broadcast_refresh

logger = logging.getLogger(__name__)

PATIENT_FIELDS = ('name', 'age', 'gender', 'phone', 'condition', 'status', 'vitals')
VITAL_KEYS = ('temp', 'bp', 'pulse', 'spo2', 'respiratoryRate', 'weight')


def serialize_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'age': p.age,
        'gender': p.gender,
        'phone': p.phone,
        'condition': p.condition,
        'status': p.status,
        'vitals': p.vitals,
        'departmentId': p.department_id,
        'createdAt': p.created_at,
        'updatedAt': p.updated_at,
    }


def list_patients(q=None, limit: int = 50):
    qs = Patient.objects.filter(status='Active').order_by('-created_at', '-id')
    if q:
        qs = qs.filter(Q(name__icontains=q) | Q(phone__icontains=q))
    return qs[:limit]


def _department_or_raise(department_id):
    if not department_id:
        return None
    dept = Department.objects.filter(id=department_id).first()
    if dept is None:
        from rest_framework.exceptions import ValidationError
        raise ValidationError({'departmentId': ['Department not found']})
    return dept


def create_patient(*, department_id=None, **fields) -> Patient:
    data = {k: v for k, v in fields.items() if k in PATIENT_FIELDS and v is not None}
    patient = Patient.objects.create(department=_department_or_raise(department_id), **data)
    logger.info('Patient %s registered', patient.id)
    broadcast_refresh('patients')
    return patient


def update_patient(patient_id, *, department_id=None, **fields) -> Patient:
    from rest_framework.exceptions import NotFound
    patient = Patient.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    for key, value in fields.items():
        if key in PATIENT_FIELDS and value is not None:
            setattr(patient, key, value)
    if department_id is not None:
        patient.department = _department_or_raise(department_id)
    patient.save()
    broadcast_refresh('patients')
    return patient


def deactivate_patient(patient_id) -> Patient:
    return update_patient(patient_id, status='Inactive')


def update_vitals(patient_id, vitals: dict) -> Patient:
    """Merge the given readings into the stored vitals and stamp ``lastUpdated``."""
    from rest_framework.exceptions import NotFound
    patient = Patient.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')
    merged = dict(patient.vitals or {})
    merged.update({k: v for k, v in vitals.items() if k in VITAL_KEYS and v is not None})
    merged['lastUpdated'] = timezone.now().isoformat()
    patient.vitals = merged
    patient.save(update_fields=['vitals', 'updated_at'])
    broadcast_refresh('patients')
    return patient
