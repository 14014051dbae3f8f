"""
CATALOG App - URL Configuration
"""

from django.urls import path

from . import views

app_name = 'catalog'

urlpatterns = [
    path('products/', views.ProductListView.as_view(), name='product-list'),
    path('products/categories/', views.ProductCategoriesView.as_view(), name='product-categories'),
    path('products/low-stock/', views.LowStockProductsView.as_view(), name='product-low-stock'),
    path('products/<str:product_id>/', views.ProductDetailView.as_view(), name='product-detail'),
]
