from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsStaff
from ..services.doctors import list_doctors


@api_view(['GET'])
@permission_classes([IsStaff])
def doctors(request):
    """Active doctors ordered by name.
    Query params:
      - q: optional search (name/username contains)
      - departmentId: only doctors of that department
      - page, pageSize: pagination (optional)
    """
    q = (request.query_params.get('q') or '').strip() or None
    try:
        department_id = int(request.query_params['departmentId']) if request.query_params.get('departmentId') else None
        page = int(request.query_params.get('page')) if request.query_params.get('page') else None
        page_size = int(request.query_params.get('pageSize')) if request.query_params.get('pageSize') else None
    except ValueError:
        return Response({'success': False, 'error': 'Invalid query parameters'}, status=400)

    cache_key = f"doctors:d={department_id}:q={q or ''}:p={page}:ps={page_size}"
    cached = cache.get(cache_key)
    if cached:
        return Response(cached)

    data, total = list_doctors(department_id=department_id, q=q, page=page, page_size=page_size)
    payload = {
        'success': True,
        'data': data,
        'pagination': {'total': total, 'page': page or 1, 'pageSize': page_size or total},
    }
    cache.set(cache_key, payload, 60)
    return Response(payload)
