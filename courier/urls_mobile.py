"""
COURIER App - Mobile API URL Configuration
"""

from django.urls import path

from .api_mobile import (
    AssignmentDetailView,
    AssignmentListView,
    AssignmentStatusUpdateView,
    CourierDashboardView,
    CourierLoginView,
    CourierProfileView,
    CourierRefreshTokenView,
    TrackLocationView,
    UploadDeliveryPhotoView,
)

app_name = 'mobile_api'

urlpatterns = [
    # Authentication
    path('auth/login/', CourierLoginView.as_view(), name='login'),
    path('auth/refresh/', CourierRefreshTokenView.as_view(), name='refresh'),

    # Profile & dashboard
    path('profile/', CourierProfileView.as_view(), name='profile'),
    path('dashboard/', CourierDashboardView.as_view(), name='dashboard'),

    # Assignments
    path('assignments/', AssignmentListView.as_view(), name='assignment_list'),
    path('assignments/<str:assignment_id>/', AssignmentDetailView.as_view(), name='assignment_detail'),
    path('assignments/<str:assignment_id>/status/', AssignmentStatusUpdateView.as_view(), name='assignment_status'),
    path('assignments/<str:assignment_id>/photo/', UploadDeliveryPhotoView.as_view(), name='assignment_photo'),
    path('assignments/<str:assignment_id>/location/', TrackLocationView.as_view(), name='assignment_location'),
]
