from django.urls import path
from . import views

urlpatterns = [
    path('inventory/items/', views.item_list_create, name='inventory-item-list-create'),
    path('inventory/items/<int:pk>/', views.item_detail, name='inventory-item-detail'),
    path('inventory/items/<int:pk>/section/', views.item_section, name='inventory-item-section'),
    path('inventory/sections/', views.section_list, name='inventory-section-list'),
    path('inventory/categories/', views.category_list_create, name='inventory-category-list-create'),
    path('inventory/categories/<int:pk>/', views.category_detail, name='inventory-category-detail'),
    path('inventory/permissions/', views.inventory_permissions, name='inventory-permissions'),
]
