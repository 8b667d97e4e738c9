from django.db import connection
from django.http import JsonResponse
from django.utils import timezone


def health_check(request):
    """Liveness probe; also confirms the database answers."""
    with connection.cursor() as cursor:
        cursor.execute('SELECT 1')
    return JsonResponse({'status': 'ok', 'time': timezone.now().isoformat()})


def error_404(request, exception):
    return JsonResponse({'error': 'Not found', 'status': 404}, status=404)


def error_500(request):
    return JsonResponse({'error': 'Internal server error', 'status': 500}, status=500)
