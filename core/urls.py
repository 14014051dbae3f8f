"""
Core App URLs
"""

from django.urls import path

from .views import (
    AdminLoginView, AdminRegisterView, MeView, TokenRefreshView,
    UserDetailView, UserListView,
)

urlpatterns = [
    # Authentication
    path('auth/login/', AdminLoginView.as_view(), name='auth-login'),
    path('auth/register/', AdminRegisterView.as_view(), name='auth-register'),
    path('auth/refresh/', TokenRefreshView.as_view(), name='auth-refresh'),
    path('auth/me/', MeView.as_view(), name='auth-me'),

    # User management
    path('users/', UserListView.as_view(), name='user-list'),
    path('users/<str:user_id>/', UserDetailView.as_view(), name='user-detail'),
]
