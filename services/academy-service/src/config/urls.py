# services/academy-service/src/config/urls.py
"""
Academy Service URL Configuration
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.db import connection, DatabaseError
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView


def health_check(request):
    """Liveness probe."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'academy-service',
        'version': '1.0.0'
    })


def readiness_check(request):
    """Readiness probe with database connectivity."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        db_status = 'connected'
    except DatabaseError as e:
        db_status = f'error: {e}'

    is_ready = db_status == 'connected'

    return JsonResponse({
        'status': 'ready' if is_ready else 'not_ready',
        'service': 'academy-service',
        'checks': {
            'database': db_status,
        }
    }, status=200 if is_ready else 503)


urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', health_check, name='health_check'),
    path('ready/', readiness_check, name='readiness_check'),
    path('api/v1/', include('apps.core.urls')),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
