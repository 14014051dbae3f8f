"""
REPORTS App - URL Configuration
"""

from django.urls import path

from . import views

app_name = 'reports'

urlpatterns = [
    path('dashboard/', views.DashboardMetricsView.as_view(), name='dashboard'),
    path('period/', views.PeriodReportView.as_view(), name='period'),
]
