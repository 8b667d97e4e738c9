"""
URL configuration for the household finance API.

Every endpoint lives under ``/api/``; one include per app.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from config.views import health_check

urlpatterns = [
    # Health check
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),

    # API endpoints
    path('api/households/', include('apps.households.urls')),
    path('api/lists/', include('apps.lists.urls')),
    path('api/expenses/', include('apps.expenses.urls')),
    path('api/reports/', include('apps.expenses.report_urls')),
    path('api/incomes/', include('apps.incomes.urls')),
    path('api/notifications/', include('apps.notifications.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
