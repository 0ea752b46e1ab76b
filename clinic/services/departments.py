from collections import Counter

from django.db.models import Sum

from clinic.models import Department

FALLBACK_DEPARTMENTS = [
    'Administration', 'Cardiology', 'Emergency', 'Pharmacy',
    'Laboratory', 'Radiology', 'ICU', 'Surgery',
]


def split_list(value) -> list:
    """Accept either a list or a comma separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def serialize_department(d: Department) -> dict:
    return {
        'id': d.id,
        'name': d.name,
        'description': d.description,
        'location': d.location,
        'contactNumber': d.contact_number,
        'email': d.email,
        'operatingHours': d.operating_hours,
        'status': d.status,
        'capacity': d.capacity,
        'currentOccupancy': d.current_occupancy,
        'specializations': d.specializations,
        'equipment': d.equipment,
        'createdAt': d.created_at,
        'updatedAt': d.updated_at,
    }


def department_stats() -> dict:
    departments = list(Department.objects.all())
    totals = Department.objects.aggregate(capacity=Sum('capacity'), occupancy=Sum('current_occupancy'))
    capacity = totals['capacity'] or 0
    occupancy = totals['occupancy'] or 0
    specializations = Counter()
    for d in departments:
        specializations.update(d.specializations or [])
    return {
        'totalDepartments': len(departments),
        'activeDepartments': sum(1 for d in departments if d.status == 'Active'),
        'totalCapacity': capacity,
        'currentOccupancy': occupancy,
        'occupancyRate': round(occupancy * 100 / capacity) if capacity else 0,
        'byStatus': dict(Counter(d.status for d in departments)),
        'bySpecialization': dict(specializations),
    }


def department_options() -> list[str]:
    names = list(Department.objects.filter(status='Active').values_list('name', flat=True))
    return names or list(FALLBACK_DEPARTMENTS)
