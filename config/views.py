from django.http import JsonResponse
from rest_framework import status
from rest_framework.response import Response


def health_check(request):
    """Liveness probe (for Render)."""
    return JsonResponse({'status': 'ok'})


def error_404(request, exception):
    """Custom 404 handler."""
    return JsonResponse({
        'error': 'Not found',
        'status': 404
    }, status=404)


def error_500(request):
    """Custom 500 handler."""
    return JsonResponse({
        'error': 'Internal server error',
        'status': 500
    }, status=500)


def error_response(exc, http_status):
    """Serialize a service error as the API error body."""
    return Response(
        {'error': str(exc), 'code': getattr(exc, 'code', 'error')},
        status=http_status,
    )


def contention_response(exc):
    """Storage contention: ask the client to retry the whole request."""
    response = error_response(exc, status.HTTP_503_SERVICE_UNAVAILABLE)
    response['Retry-After'] = '1'
    return response
