"""
FLEET App - URL Configuration

Admin routes for courier management.
"""

from django.urls import path

from . import views

app_name = 'fleet'

urlpatterns = [
    path('repartidores/', views.CourierListView.as_view(), name='courier-list'),
    path('repartidores/register/', views.CourierRegisterView.as_view(), name='courier-register'),
    path('repartidores/<str:courier_id>/', views.CourierDetailView.as_view(), name='courier-detail'),
]
