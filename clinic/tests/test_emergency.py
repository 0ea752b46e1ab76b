from datetime import timedelta

import pytest
from django.test import override_settings
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.models import EmergencyAlert, Patient
from clinic.services import emergency as svc
from clinic.services.ot_board import ot_statistics


@pytest.mark.parametrize('priority, severity', [(1, 'critical'), (2, 'high'), (3, 'medium'), (5, 'medium')])
def test_alert_severity(priority, severity):
    assert svc.alert_severity(priority) == severity


@pytest.mark.django_db
def test_create_alert_defaults():
    alert = svc.create_alert(code_type='CODE_BLUE', location='Ward 3')
    assert alert.message == 'CODE_BLUE at Ward 3'
    assert alert.priority == 3
    assert alert.broadcast_to == ['ALL']
    assert alert.status == EmergencyAlert.STATUS_ACTIVE


@pytest.mark.django_db
def test_resolve_stamps_time_once():
    alert = svc.create_alert(code_type='CODE_RED', location='Lab', priority=1)
    resolved = svc.resolve_alert(alert.id)
    assert resolved.status == 'resolved'
    stamp = resolved.resolved_at
    assert stamp is not None
    again = svc.update_alert(alert.id, status='resolved', message='all clear')
    assert again.resolved_at == stamp
    assert again.message == 'all clear'


@pytest.mark.django_db
def test_reopening_clears_resolved_time():
    alert = svc.create_alert(code_type='CODE_RED', location='Lab', priority=1)
    svc.resolve_alert(alert.id)
    reopened = svc.update_alert(alert.id, status='active')
    assert reopened.resolved_at is None
    assert svc.resolve_alert(alert.id).resolved_at is not None


@pytest.mark.django_db
def test_missing_alert():
    with pytest.raises(NotFound):
        svc.update_alert(42, status='resolved')
    with pytest.raises(NotFound):
        svc.delete_alert(42)


def test_emergency_case_becomes_alert(doctor):
    alert = svc.add_emergency_case(patient_name='Asha Rao', condition='Chest pain', priority='Critical',
                                   created_by=doctor)
    assert alert.code_type == 'MEDICAL_EMERGENCY'
    assert alert.location == 'Emergency Department'
    assert alert.message == 'Chest pain - Patient: Asha Rao'
    assert alert.priority == 1
    assert alert.broadcast_to == ['DOCTOR', 'NURSE']
    assert alert.created_by == doctor

    assert svc.add_emergency_case(patient_name='X', condition='Fall').priority == 2
    assert svc.add_emergency_case(patient_name='Y', condition='Sprain', priority='low').priority == 3


@pytest.mark.django_db
def test_queue_orders_alerts_then_patients():
    now = timezone.now()
    medium = svc.create_alert(code_type='CODE_YELLOW', location='Lobby', priority=3)
    critical = svc.create_alert(code_type='CODE_BLUE', location='ICU', priority=1)
    resolved = svc.create_alert(code_type='CODE_RED', location='Lab', priority=1)
    svc.resolve_alert(resolved.id)
    EmergencyAlert.objects.filter(id=critical.id).update(created_at=now - timedelta(minutes=12))

    Patient.objects.create(name='Kiran', condition='Critical head injury')
    Patient.objects.create(name='Meena', condition='Routine checkup')
    Patient.objects.create(name='Ravi', condition='Urgent care needed')

    queue = svc.assemble_emergency_queue(now)
    assert [item['id'] for item in queue[:2]] == [f'alert-{critical.id}', f'alert-{medium.id}']
    assert queue[0]['priority'] == 'critical'
    assert queue[0]['waitTime'] == '12 mins'
    assert queue[0]['waitMinutes'] == 12
    assert queue[1]['priority'] == 'medium'

    patients = {item['patient']: item for item in queue[2:]}
    assert set(patients) == {'Kiran', 'Ravi'}
    assert patients['Kiran']['priority'] == 'critical'
    assert patients['Ravi']['priority'] == 'high'
    assert patients['Ravi']['waitTime'] == '0 hours'


@pytest.mark.django_db
@override_settings(EMERGENCY_QUEUE_LIMIT=2)
def test_queue_is_capped():
    for i in range(4):
        svc.create_alert(code_type='CODE_BLUE', location=f'Bed {i}')
    Patient.objects.create(name='Kiran', condition='critical')
    assert len(svc.assemble_emergency_queue()) == 2


@pytest.mark.django_db
def test_at_most_three_patients_from_recent_admissions():
    for i in range(5):
        Patient.objects.create(name=f'P{i}', condition='emergency admission')
    queue = svc.assemble_emergency_queue()
    assert len(queue) == 3
    assert all(item['id'].startswith('patient-') for item in queue)


@pytest.mark.django_db
def test_ot_statistics_counts_emergencies():
    now = timezone.now()
    alert = svc.create_alert(code_type='CODE_BLUE', location='ICU', priority=1)
    EmergencyAlert.objects.filter(id=alert.id).update(created_at=now - timedelta(minutes=20))
    svc.create_alert(code_type='CODE_BLUE', location='Ward 2', priority=2)
    EmergencyAlert.objects.filter(location='Ward 2').update(created_at=now - timedelta(minutes=10))

    stats = ot_statistics(now)
    assert stats['activeEmergencies'] == 2
    assert stats['emergencyCases'] == 2
    assert stats['averageWaitTime'] == 15
    # default theaters are seeded on first read, OT-003 under maintenance
    assert stats['totalTheaters'] == 4
    assert stats['maintenanceTheaters'] == 1
    assert stats['availableTheaters'] == 3
