from datetime import timedelta

import pytest
from django.utils import timezone
from rest_framework.exceptions import NotFound

from clinic.services import inventory as svc


@pytest.mark.parametrize('current, minimum, status', [
    (0, 10, 'critical'),
    (5, 10, 'critical'),
    (6, 10, 'low'),
    (10, 10, 'low'),
    (11, 10, 'available'),
    (0, 0, 'critical'),
])
def test_stock_status(current, minimum, status):
    assert svc.stock_status(current, minimum) == status


@pytest.mark.django_db
def test_drug_crud_and_search():
    para = svc.add_drug(name='Paracetamol 500mg', category='Analgesic', current_stock=200, min_stock=50)
    svc.add_drug(name='Amoxicillin', current_stock=20, min_stock=40)
    assert [d.name for d in svc.list_drugs('para')] == ['Paracetamol 500mg']
    assert svc.serialize_drug(para)['status'] == 'available'

    updated = svc.update_drug(para.id, current_stock=10, unknown='ignored')
    assert updated.current_stock == 10
    assert svc.serialize_drug(updated)['status'] == 'critical'

    with pytest.raises(NotFound):
        svc.update_drug(9999, current_stock=1)


@pytest.mark.django_db
def test_low_stock_drugs_most_depleted_first():
    svc.add_drug(name='A', current_stock=30, min_stock=40)
    svc.add_drug(name='B', current_stock=5, min_stock=40)
    svc.add_drug(name='C', current_stock=100, min_stock=40)
    assert [d.name for d in svc.low_stock_drugs()] == ['B', 'A']


@pytest.mark.django_db
def test_blood_bank_stats():
    now = timezone.now()
    svc.add_blood_unit(blood_type='O-', units_available=3, critical_level=5,
                       expiry_date=now + timedelta(days=3), collection_date=now - timedelta(days=2))
    svc.add_blood_unit(blood_type='O-', units_available=4, critical_level=5,
                       expiry_date=now + timedelta(days=30), collection_date=now - timedelta(days=20))
    svc.add_blood_unit(blood_type='A+', units_available=12, critical_level=5, status='Reserved',
                       expiry_date=now + timedelta(days=6), collection_date=now - timedelta(days=1))

    stats = svc.blood_bank_stats(now)
    assert stats['totalUnits'] == 19
    assert stats['criticalTypes'] == 1
    assert stats['expiringUnits'] == 15
    assert stats['recentDonations'] == 2
    assert stats['byBloodType'] == {'O-': 7, 'A+': 12}
    assert stats['byStatus'] == {'Available': 2, 'Reserved': 1}


@pytest.mark.django_db
def test_blood_unit_update_flags_critical():
    now = timezone.now()
    unit = svc.add_blood_unit(blood_type='B+', units_available=20, critical_level=5,
                              expiry_date=now + timedelta(days=30), collection_date=now)
    assert svc.serialize_blood_unit(unit)['isCritical'] is False
    unit = svc.update_blood_unit(unit.id, units_available=5)
    assert svc.serialize_blood_unit(unit)['isCritical'] is True
    with pytest.raises(NotFound):
        svc.update_blood_unit(9999, units_available=1)
