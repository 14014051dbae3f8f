"""
FRITOLAY Delivery Main URL Configuration
"""

from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView
from rest_framework import permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response


@api_view(['GET'])
@permission_classes([permissions.AllowAny])
def api_root(request):
    """API Root endpoint with available routes."""
    return Response({
        'name': 'FRITOLAY Delivery API',
        'version': '1.0.0',
        'endpoints': {
            'auth': {
                'login': '/api/auth/login/',
                'register': '/api/auth/register/',
                'refresh': '/api/auth/refresh/',
            },
            'users': '/api/users/',
            'orders': '/api/orders/',
            'assign': '/api/orders/assign/',
            'repartidores': '/api/repartidores/',
            'products': '/api/products/',
            'reports': {
                'dashboard': '/api/reports/dashboard/',
                'period': '/api/reports/period/',
            },
            'mobile': {
                'login': '/api/mobile/auth/login/',
                'dashboard': '/api/mobile/dashboard/',
                'assignments': '/api/mobile/assignments/',
            },
        }
    })


urlpatterns = [
    # Health checks
    path('health/', include('core.urls_health')),

    # API Root & schema
    path('api/', api_root, name='api-root'),
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),

    # Admin dashboard API
    path('api/', include('core.urls')),
    path('api/', include('logistics.urls')),
    path('api/', include('fleet.urls')),
    path('api/', include('catalog.urls')),
    path('api/reports/', include('reports.urls')),

    # Mobile API (courier app)
    path('api/mobile/', include('courier.urls_mobile')),
]
