import pytest
from django.core.cache import cache

from clinic.models import Department, Patient, User


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttling and the doctors list both live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def department(db):
    return Department.objects.create(name='Cardiology', description='Heart', location='Block A')


@pytest.fixture
def doctor(db):
    return User.objects.create_user(
        username='doc1', password='P@ssw0rd1', role='doctor', first_name='Ravi', last_name='Kumar'
    )


@pytest.fixture
def nurse(db):
    return User.objects.create_user(username='nurse1', password='P@ssw0rd1', role='nurse')


@pytest.fixture
def patient(db):
    return Patient.objects.create(name='John Doe', age=40, gender='Male', condition='Appendicitis')
