from typing import Optional

from django.contrib.auth import get_user_model
from django.db.models import Q

User = get_user_model()


def list_doctors(*, department_id: Optional[int] = None, q: Optional[str] = None,
                 page: Optional[int] = None, page_size: Optional[int] = None) -> tuple[list[dict], int]:
    qs = (
        User.objects.filter(role='doctor', status='ACTIVE')
        .select_related('department')
        .order_by('first_name', 'last_name', 'username')
    )
    if department_id:
        qs = qs.filter(department_id=department_id)
    if q:
        qs = qs.filter(Q(first_name__icontains=q) | Q(last_name__icontains=q) | Q(username__icontains=q))

    total = qs.count()
    if page and page_size:
        start = (page - 1) * page_size
        qs = qs[start:start + page_size]

    data = [{
        'id': u.id,
        'name': u.display_name,
        'email': u.email,
        'department': u.department.name if u.department else None,
    } for u in qs]
    return data, total
