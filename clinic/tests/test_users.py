import pytest
from django.utils import timezone
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import NotFound, ValidationError

from clinic.models import Appointment, User
from clinic.services import users as svc


def test_create_user(department):
    user = svc.create_user(username='nurse7', role='nurse', first_name='Meera', last_name='Nair',
                           email='meera@example.com', password='Str0ng-pass!', department_id=department.id)
    assert user.status == 'ACTIVE'
    assert user.check_password('Str0ng-pass!')
    data = svc.serialize_user(user)
    assert data['name'] == 'Meera Nair'
    assert data['department'] == {'id': department.id, 'name': 'Cardiology'}
    assert data['appointmentCount'] == 0


@pytest.mark.django_db
def test_create_without_password_cannot_log_in():
    user = svc.create_user(username='tech9', role='technician')
    assert not user.has_usable_password()


def test_duplicate_username_or_email_is_rejected(doctor):
    doctor.email = 'ravi@example.com'
    doctor.save()
    with pytest.raises(ValidationError):
        svc.create_user(username='DOC1', role='doctor')
    with pytest.raises(ValidationError):
        svc.create_user(username='doc9', role='doctor', email='RAVI@example.com')
    with pytest.raises(ValidationError):
        svc.create_user(username='doc9', role='doctor', department_id=9999)


def test_update_user(doctor, department):
    updated = svc.update_user(doctor.id, first_name='Ravi', last_name='K', department_id=department.id,
                              password='N3w-secret!')
    assert updated.display_name == 'Ravi K'
    assert updated.department == department
    assert updated.check_password('N3w-secret!')
    with pytest.raises(NotFound):
        svc.update_user(9999, first_name='x')


def test_delete_user_without_records(nurse):
    assert svc.delete_user(nurse.id) == {'id': nurse.id, 'deleted': True, 'deactivated': False}
    assert not User.objects.filter(id=nurse.id).exists()


def test_delete_doctor_with_appointments_only_deactivates(doctor, patient):
    Appointment.objects.create(patient=patient, doctor=doctor, date=timezone.now())
    Token.objects.create(user=doctor)
    result = svc.delete_user(doctor.id)
    assert result['deactivated'] is True
    doctor.refresh_from_db()
    assert doctor.status == 'INACTIVE'
    assert not Token.objects.filter(user=doctor).exists()


def test_admin_cannot_remove_themselves(db):
    admin = User.objects.create_user(username='admin1', password='x', role='admin')
    with pytest.raises(ValidationError):
        svc.delete_user(admin.id, acting_user=admin)
    with pytest.raises(ValidationError):
        svc.toggle_user_status(admin.id, acting_user=admin)


def test_toggle_status(nurse):
    Token.objects.create(user=nurse)
    assert svc.toggle_user_status(nurse.id).status == 'INACTIVE'
    assert not Token.objects.filter(user=nurse).exists()
    assert svc.toggle_user_status(nurse.id).status == 'ACTIVE'


def test_user_stats(department, doctor, nurse):
    User.objects.create_user(username='doc2', password='x', role='doctor', department=department)
    User.objects.create_user(username='doc3', password='x', role='doctor', status='INACTIVE')
    stats = svc.user_stats()
    assert stats['total'] == 3
    assert stats['inactive'] == 1
    assert stats['byRole'] == {'doctor': 2, 'nurse': 1}
    assert stats['byDepartment'] == {'Cardiology': 1}


def test_list_users_filters(doctor, nurse):
    assert [u.username for u in svc.list_users(role='nurse')] == ['nurse1']
    assert [u.username for u in svc.list_users(q='ravi')] == ['doc1']
