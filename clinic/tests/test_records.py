"""Patients, departments, doctors and displays."""
import pytest
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Department, Display, User
from clinic.services import departments, displays, doctors, patients, tokens


def test_split_list():
    assert departments.split_list('ECG, Echo ,,Holter') == ['ECG', 'Echo', 'Holter']
    assert departments.split_list(['ECG', ' ', 3]) == ['ECG', '3']
    assert departments.split_list(None) == []


@pytest.mark.django_db
def test_department_stats_and_options():
    assert departments.department_options() == departments.FALLBACK_DEPARTMENTS
    Department.objects.create(name='Cardiology', capacity=40, current_occupancy=10, specializations=['Echo'])
    Department.objects.create(name='Radiology', capacity=10, current_occupancy=5, status='Maintenance',
                              specializations=['MRI', 'Echo'])
    stats = departments.department_stats()
    assert stats['totalDepartments'] == 2
    assert stats['activeDepartments'] == 1
    assert stats['occupancyRate'] == 30
    assert stats['bySpecialization'] == {'Echo': 2, 'MRI': 1}
    assert departments.department_options() == ['Cardiology']


@pytest.mark.django_db
def test_patient_register_search_and_deactivate(department):
    p = patients.create_patient(name='Asha Rao', phone='98450 12345', department_id=department.id)
    patients.create_patient(name='Vikram Singh')
    assert [x.name for x in patients.list_patients('98450')] == ['Asha Rao']

    patients.deactivate_patient(p.id)
    assert [x.name for x in patients.list_patients()] == ['Vikram Singh']

    with pytest.raises(ValidationError):
        patients.create_patient(name='Ghost', department_id=9999)
    with pytest.raises(NotFound):
        patients.update_patient(9999, name='x')


def test_vitals_are_merged(patient):
    patients.update_vitals(patient.id, {'bp': '120/80', 'pulse': '72'})
    updated = patients.update_vitals(patient.id, {'pulse': '80', 'mood': 'ignored'})
    assert updated.vitals['bp'] == '120/80'
    assert updated.vitals['pulse'] == '80'
    assert 'mood' not in updated.vitals
    assert 'lastUpdated' in updated.vitals


def test_doctor_directory(department, doctor):
    User.objects.create_user(username='doc2', password='x', role='doctor', first_name='Anil', last_name='Menon',
                             department=department)
    User.objects.create_user(username='doc3', password='x', role='doctor', status='INACTIVE')
    data, total = doctors.list_doctors()
    assert total == 2
    assert [d['name'] for d in data] == ['Anil Menon', 'Ravi Kumar']

    data, total = doctors.list_doctors(department_id=department.id)
    assert total == 1 and data[0]['department'] == 'Cardiology'

    data, total = doctors.list_doctors(page=2, page_size=1)
    assert total == 2
    assert [d['name'] for d in data] == ['Ravi Kumar']


def test_display_content_types(patient, department):
    tokens.create_token(patient_id=patient.id, department_id=department.id, priority='Emergency')

    lobby = displays.create_display(location='Lobby', content='Token Queue')
    rows = displays.display_data(lobby)['tokens']
    assert rows[0]['priorityLevel'] == 3
    assert rows[0]['displayName'] == 'J*** D***'
    assert 'patientName' not in rows[0]

    ward = displays.create_display(location='Cardio wing', content='Department Token Queue',
                                   config={'departmentId': department.id})
    data = displays.display_data(ward)
    assert data['department'] == 'Cardiology'
    assert data['board']['nextToken']['displayName'] == 'J*** D***'

    mixed = displays.create_display(location='Atrium', content='Mixed Dashboard')
    data = displays.display_data(mixed)
    assert {'tokens', 'alerts', 'departments'} <= set(data)


@pytest.mark.django_db
def test_heartbeat_marks_display_online():
    screen = Display.objects.create(location='ER', content='Emergency Alerts')
    beat = displays.heartbeat(screen.id)
    assert beat.status == 'online'
    assert beat.last_update is not None
    with pytest.raises(NotFound):
        displays.heartbeat(9999)


@pytest.mark.django_db
def test_seed_command_is_rerunnable():
    from io import StringIO
    from django.core.management import call_command
    from clinic.models import Drug, Prescription, SurgeryBooking, Theater
    call_command('seed_hospital', stdout=StringIO())
    call_command('seed_hospital', stdout=StringIO())
    assert Department.objects.count() == 5
    assert Drug.objects.count() == 4
    assert Prescription.objects.count() == 2
    assert Theater.objects.get(id='OT-001').status == Theater.STATUS_IN_PROGRESS
    # the second run finds every slot taken
    assert SurgeryBooking.objects.count() == 3


@pytest.mark.django_db
@pytest.mark.parametrize('config, expected', [
    ({'departmentId': 3}, 3),
    ({'departmentId': '7'}, 7),
    ({'departmentId': 'abc'}, None),
    ({'departmentId': True}, None),
    ({'departmentId': 0}, None),
    ({}, None),
    (None, None),
])
def test_config_department_id(config, expected):
    assert displays.config_department_id(config) == expected


@pytest.mark.django_db
def test_department_display_with_bad_config_has_no_board():
    screen = Display.objects.create(location='Ward', content='Department Token Queue',
                                    config={'departmentId': 'abc'})
    assert displays.display_data(screen)['board'] is None
