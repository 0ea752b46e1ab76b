from __future__ import annotations

import logging
from collections import Counter
from datetime import timedelta

from django.db.models import F, Sum
from django.utils import timezone

from clinic.models import BloodUnit, Drug
from clinic.realtime.broadcast import broadcast_refresh

logger = logging.getLogger(__name__)

DRUG_FIELDS = ('name', 'category', 'current_stock', 'min_stock', 'location', 'batch_number', 'expiry_date')
BLOOD_FIELDS = (
    'blood_type', 'units_available', 'critical_level', 'status', 'expiry_date',
    'donor_id', 'collection_date', 'location', 'batch_number',
)


def stock_status(current: int, minimum: int) -> str:
    """critical at or below half the minimum, low at or below the minimum."""
    if current <= minimum * 0.5:
        return 'critical'
    if current <= minimum:
        return 'low'
    return 'available'


def serialize_drug(drug: Drug) -> dict:
    return {
        'id': drug.id,
        'name': drug.name,
        'category': drug.category,
        'currentStock': drug.current_stock,
        'minStock': drug.min_stock,
        'location': drug.location,
        'batchNumber': drug.batch_number,
        'expiryDate': drug.expiry_date,
        'status': stock_status(drug.current_stock, drug.min_stock),
    }


def list_drugs(q: str = ''):
    qs = Drug.objects.order_by('name')
    if q:
        qs = qs.filter(name__icontains=q)
    return qs


def add_drug(**fields) -> Drug:
    drug = Drug.objects.create(**{k: v for k, v in fields.items() if k in DRUG_FIELDS and v is not None})
    logger.info('Drug %s added (%s in stock)', drug.name, drug.current_stock)
    broadcast_refresh('inventory')
    return drug


def update_drug(drug_id, **fields) -> Drug:
    from rest_framework.exceptions import NotFound
    drug = Drug.objects.filter(id=drug_id).first()
    if drug is None:
        raise NotFound('Drug not found')
    for key, value in fields.items():
        if key in DRUG_FIELDS and value is not None:
            setattr(drug, key, value)
    drug.save()
    if stock_status(drug.current_stock, drug.min_stock) == 'critical':
        logger.warning('Drug %s is at critical stock (%s/%s)', drug.name, drug.current_stock, drug.min_stock)
    broadcast_refresh('inventory')
    return drug


def low_stock_drugs():
    return [d for d in Drug.objects.filter(current_stock__lte=F('min_stock')).order_by('current_stock')]


def serialize_blood_unit(unit: BloodUnit) -> dict:
    return {
        'id': unit.id,
        'bloodType': unit.blood_type,
        'unitsAvailable': unit.units_available,
        'criticalLevel': unit.critical_level,
        'status': unit.status,
        'expiryDate': unit.expiry_date,
        'donorId': unit.donor_id,
        'collectionDate': unit.collection_date,
        'location': unit.location,
        'batchNumber': unit.batch_number,
        'isCritical': unit.units_available <= unit.critical_level,
    }


def list_blood_units():
    return BloodUnit.objects.all()


def add_blood_unit(**fields) -> BloodUnit:
    unit = BloodUnit.objects.create(**{k: v for k, v in fields.items() if k in BLOOD_FIELDS and v is not None})
    broadcast_refresh('blood-bank')
    return unit


def update_blood_unit(unit_id, **fields) -> BloodUnit:
    from rest_framework.exceptions import NotFound
    unit = BloodUnit.objects.filter(id=unit_id).first()
    if unit is None:
        raise NotFound('Blood unit not found')
    for key, value in fields.items():
        if key in BLOOD_FIELDS and value is not None:
            setattr(unit, key, value)
    unit.save()
    broadcast_refresh('blood-bank')
    return unit


def blood_bank_stats(now=None) -> dict:
    now = now or timezone.now()
    week_ahead = now + timedelta(days=7)
    week_ago = now - timedelta(days=7)
    units = list(BloodUnit.objects.all())

    totals = {}
    critical_types = set()
    for unit in units:
        totals[unit.blood_type] = totals.get(unit.blood_type, 0) + unit.units_available
        if unit.units_available <= unit.critical_level:
            critical_types.add(unit.blood_type)

    expiring = BloodUnit.objects.filter(expiry_date__gte=now, expiry_date__lte=week_ahead)
    return {
        'totalUnits': sum(totals.values()),
        'criticalTypes': len(critical_types),
        'expiringUnits': expiring.aggregate(n=Sum('units_available'))['n'] or 0,
        'recentDonations': BloodUnit.objects.filter(collection_date__gte=week_ago).count(),
        'byBloodType': totals,
        'byStatus': dict(Counter(u.status for u in units)),
    }
