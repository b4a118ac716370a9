from rest_framework import status as http_status
from rest_framework.response import Response

from coordination.exceptions import Forbidden


def data_response(data, status=http_status.HTTP_200_OK, **extra):
    return Response({'data': data, **extra}, status=status)


def list_response(items, **extra):
    items = list(items)
    return Response({'data': items, 'count': len(items), **extra})


def require_admin(request):
    if not getattr(request.user, 'is_admin', False):
        raise Forbidden('Admin access required')
