import pytest
from rest_framework.exceptions import NotFound, ValidationError

from clinic.exceptions import TransitionNotAllowed
from clinic.models import Drug, Prescription
from clinic.services import prescriptions as svc


def _meds(*names):
    return [{'drugName': n, 'dosage': '500mg', 'frequency': 'Twice daily', 'duration': '5 days'} for n in names]


@pytest.fixture
def paracetamol(db):
    return Drug.objects.create(name='Paracetamol 500mg', current_stock=100, min_stock=20)


def test_create_links_existing_drug_case_insensitively(patient, doctor, paracetamol):
    p = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds('paracetamol 500MG'))
    data = svc.serialize_prescription(p)
    assert data['status'] == 'Pending'
    assert data['doctor'] == 'Ravi Kumar'
    assert data['items'][0]['drugId'] == paracetamol.id
    assert Drug.objects.count() == 1


def test_unknown_drug_is_added_with_no_stock(patient, doctor):
    svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds('Cetirizine'))
    drug = Drug.objects.get(name='Cetirizine')
    assert drug.current_stock == 0
    assert drug.min_stock == svc.NEW_DRUG_MIN_STOCK


def test_create_rejects_missing_patient_or_empty_list(patient, db):
    with pytest.raises(NotFound):
        svc.create_prescription(patient_id=9999, medications=_meds('X'))
    with pytest.raises(ValidationError):
        svc.create_prescription(patient_id=patient.id, medications=[])
    assert Prescription.objects.count() == 0


def test_process_dispenses_stock(patient, doctor, paracetamol):
    p = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds(paracetamol.name))
    item = p.items.get()
    processed = svc.process_prescription(p.id, [{'itemId': item.id, 'quantityDispensed': 10}])
    assert processed.status == Prescription.STATUS_PROCESSING
    assert processed.items.get().quantity_dispensed == 10
    paracetamol.refresh_from_db()
    assert paracetamol.current_stock == 90

    with pytest.raises(TransitionNotAllowed):
        svc.process_prescription(p.id, [{'itemId': item.id, 'quantityDispensed': 1}])


def test_insufficient_stock_rolls_back(patient, doctor, paracetamol):
    Drug.objects.create(name='Insulin', current_stock=2, min_stock=10)
    p = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds(paracetamol.name, 'Insulin'))
    first, second = p.items.order_by('id')
    with pytest.raises(ValidationError) as exc:
        svc.process_prescription(p.id, [
            {'itemId': first.id, 'quantityDispensed': 10},
            {'itemId': second.id, 'quantityDispensed': 5},
        ])
    assert 'Insufficient stock for Insulin. Available: 2, Required: 5' in str(exc.value.detail)
    paracetamol.refresh_from_db()
    assert paracetamol.current_stock == 100
    p.refresh_from_db()
    assert p.status == Prescription.STATUS_PENDING


def test_foreign_item_is_rejected(patient, doctor, paracetamol):
    p = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds(paracetamol.name))
    with pytest.raises(ValidationError):
        svc.process_prescription(p.id, [{'itemId': 9999, 'quantityDispensed': 1}])
    with pytest.raises(NotFound):
        svc.process_prescription(9999, [])


def test_complete_is_terminal(patient, doctor, paracetamol):
    p = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds(paracetamol.name))
    assert svc.complete_prescription(p.id).status == Prescription.STATUS_COMPLETED
    with pytest.raises(TransitionNotAllowed):
        svc.complete_prescription(p.id)


def test_pharmacy_dashboard(patient, doctor, paracetamol):
    Drug.objects.create(name='Insulin', current_stock=2, min_stock=10)
    Drug.objects.create(name='Amoxicillin', current_stock=8, min_stock=10)
    svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds('Insulin', paracetamol.name))
    done = svc.create_prescription(patient_id=patient.id, doctor=doctor, medications=_meds(paracetamol.name))
    svc.complete_prescription(done.id)

    stats = svc.pharmacy_statistics()
    assert stats == {
        'totalDrugs': 3,
        'lowStockCount': 2,
        'criticalStockCount': 1,
        'availableStock': 1,
        'pendingPrescriptions': 1,
        'processingPrescriptions': 0,
        'completedPrescriptionsToday': 1,
    }
    assert svc.top_medications() == [{'name': 'Paracetamol 500mg', 'count': 2}, {'name': 'Insulin', 'count': 1}]

    trends = svc.prescription_trends()
    assert len(trends) == 7
    assert trends[-1]['pending'] == 1 and trends[-1]['completed'] == 1
    assert all(day['pending'] == 0 for day in trends[:-1])
