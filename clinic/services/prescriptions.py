"""
Prescriptions and pharmacy statistics.

Doctors write prescriptions against drug names; an unknown name is added
to the inventory with zero stock so the pharmacy can order it.  Dispensing
locks the prescription and every drug row it draws from, so stock never
goes negative under concurrent dispensing.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, time, timedelta
from typing import Iterable, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from clinic.exceptions import TransitionNotAllowed
from clinic.models import Drug, Patient, Prescription, PrescriptionItem
from clinic.realtime.broadcast import broadcast_refresh
from clinic.services.inventory import stock_status

logger = logging.getLogger(__name__)

NEW_DRUG_MIN_STOCK = 10


def serialize_prescription(p: Prescription) -> dict:
    return {
        'id': p.id,
        'patientId': p.patient_id,
        'patient': p.patient.name,
        'doctor': p.doctor.display_name if p.doctor else 'Unknown Doctor',
        'status': p.status,
        'notes': p.notes,
        'createdAt': p.created_at,
        'items': [{
            'id': item.id,
            'drugId': item.drug_id,
            'drugName': item.drug.name,
            'dosage': item.dosage,
            'frequency': item.frequency,
            'duration': item.duration,
            'instructions': item.instructions,
            'quantityDispensed': item.quantity_dispensed,
        } for item in p.items.all()],
    }


def _with_items(qs):
    return qs.select_related('patient', 'doctor').prefetch_related('items__drug')


def list_prescriptions(status: Optional[str] = None, patient_id=None):
    qs = _with_items(Prescription.objects.order_by('-created_at', '-id'))
    if status:
        qs = qs.filter(status=status)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    return qs


def _drug_for(name: str) -> Drug:
    drug = Drug.objects.filter(name__iexact=name).order_by('id').first()
    if drug is None:
        drug = Drug.objects.create(name=name, current_stock=0, min_stock=NEW_DRUG_MIN_STOCK)
        logger.info('Drug %s added to inventory from a prescription', name)
    if drug.current_stock <= 0:
        logger.warning('Drug %s is out of stock but was prescribed', drug.name)
    if drug.expiry_date and drug.expiry_date < timezone.now():
        logger.warning('Drug %s has expired but was prescribed', drug.name)
    return drug


def create_prescription(*, patient_id, medications: Iterable[dict], doctor=None, notes: str = '') -> Prescription:
    """Write a prescription; each medication is ``{drugName, dosage, frequency, duration, instructions}``."""
    from rest_framework.exceptions import NotFound, ValidationError
    medications = list(medications)
    if not medications:
        raise ValidationError('At least one medication is required')
    patient = Patient.objects.filter(id=patient_id).first()
    if patient is None:
        raise NotFound('Patient not found')

    with transaction.atomic():
        prescription = Prescription.objects.create(
            patient=patient,
            doctor=doctor if getattr(doctor, 'pk', None) else None,
            notes=notes,
        )
        PrescriptionItem.objects.bulk_create([
            PrescriptionItem(
                prescription=prescription,
                drug=_drug_for(med['drugName']),
                dosage=med['dosage'],
                frequency=med['frequency'],
                duration=med['duration'],
                instructions=med.get('instructions') or '',
            )
            for med in medications
        ])
    logger.info('Prescription %s written for patient %s', prescription.id, patient.id)
    broadcast_refresh('prescriptions')
    return _with_items(Prescription.objects).get(id=prescription.id)


def process_prescription(prescription_id, dispensed: Iterable[dict]) -> Prescription:
    """Dispense stock for a Pending prescription and move it to Processing.

    ``dispensed`` holds ``{itemId, quantityDispensed}`` pairs.  Any item
    short on stock aborts the whole dispense.
    """
    from rest_framework.exceptions import NotFound, ValidationError
    with transaction.atomic():
        prescription = Prescription.objects.select_for_update().filter(id=prescription_id).first()
        if prescription is None:
            raise NotFound('Prescription not found')
        if prescription.status != Prescription.STATUS_PENDING:
            raise TransitionNotAllowed(f'Prescription is already {prescription.status}')

        items = {item.id: item for item in prescription.items.all()}
        for entry in dispensed:
            item = items.get(entry['itemId'])
            if item is None:
                raise ValidationError(f"Item {entry['itemId']} is not on this prescription")
            quantity = entry['quantityDispensed']
            drug = Drug.objects.select_for_update().get(id=item.drug_id)
            if drug.current_stock < quantity:
                raise ValidationError(
                    f'Insufficient stock for {drug.name}. Available: {drug.current_stock}, Required: {quantity}'
                )
            Drug.objects.filter(id=drug.id).update(current_stock=F('current_stock') - quantity)
            item.quantity_dispensed += quantity
            item.save(update_fields=['quantity_dispensed'])
            if stock_status(drug.current_stock - quantity, drug.min_stock) == 'critical':
                logger.warning('Drug %s is at critical stock after dispensing', drug.name)

        prescription.status = Prescription.STATUS_PROCESSING
        prescription.save(update_fields=['status', 'updated_at'])
    logger.info('Prescription %s dispensed', prescription_id)
    broadcast_refresh('prescriptions', 'inventory')
    return _with_items(Prescription.objects).get(id=prescription_id)


def complete_prescription(prescription_id) -> Prescription:
    from rest_framework.exceptions import NotFound
    with transaction.atomic():
        prescription = Prescription.objects.select_for_update().filter(id=prescription_id).first()
        if prescription is None:
            raise NotFound('Prescription not found')
        if prescription.status == Prescription.STATUS_COMPLETED:
            raise TransitionNotAllowed('Prescription is already Completed')
        prescription.status = Prescription.STATUS_COMPLETED
        prescription.save(update_fields=['status', 'updated_at'])
    broadcast_refresh('prescriptions')
    return _with_items(Prescription.objects).get(id=prescription_id)


def _start_of_day(d) -> datetime:
    return timezone.make_aware(datetime.combine(d, time.min))


def pharmacy_statistics(now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    drugs = list(Drug.objects.only('current_stock', 'min_stock'))
    statuses = Counter(stock_status(d.current_stock, d.min_stock) for d in drugs)
    low = statuses['low'] + statuses['critical']
    by_status = Counter(Prescription.objects.values_list('status', flat=True))
    completed_today = Prescription.objects.filter(
        status=Prescription.STATUS_COMPLETED, updated_at__gte=_start_of_day(timezone.localdate(now))
    ).count()
    return {
        'totalDrugs': len(drugs),
        'lowStockCount': low,
        'criticalStockCount': statuses['critical'],
        'availableStock': len(drugs) - low,
        'pendingPrescriptions': by_status[Prescription.STATUS_PENDING],
        'processingPrescriptions': by_status[Prescription.STATUS_PROCESSING],
        'completedPrescriptionsToday': completed_today,
    }


def top_medications(limit: int = 5) -> list[dict]:
    names = PrescriptionItem.objects.values_list('drug__name', flat=True)
    return [{'name': name, 'count': count} for name, count in Counter(names).most_common(limit)]


def prescription_trends(now: Optional[datetime] = None, days: int = 7) -> list[dict]:
    """Per-day prescription counts by status for the last ``days`` days, oldest first."""
    now = now or timezone.now()
    today = timezone.localdate(now)
    first = today - timedelta(days=days - 1)
    trends = {
        first + timedelta(days=i): {'pending': 0, 'processing': 0, 'completed': 0}
        for i in range(days)
    }
    rows = Prescription.objects.filter(created_at__gte=_start_of_day(first)).values_list('created_at', 'status')
    for created_at, status in rows:
        day = trends.get(timezone.localdate(created_at))
        if day is not None:
            day[status.lower()] += 1
    return [{'date': d.isoformat(), **counts} for d, counts in sorted(trends.items())]
