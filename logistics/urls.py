"""
Logistics App URLs
"""

from django.urls import path

from .views import OrderAssignView, OrderDetailView, OrderListView

urlpatterns = [
    path('orders/', OrderListView.as_view(), name='order-list'),
    path('orders/assign/', OrderAssignView.as_view(), name='order-assign'),
    path('orders/<str:order_id>/', OrderDetailView.as_view(), name='order-detail'),
]
