from django.urls import path
from . import views

urlpatterns = [
    path('workers/', views.worker_list_create, name='worker-list-create'),
    path('workers/permissions/', views.worker_permissions, name='worker-permissions'),
    path('workers/occupations/', views.occupation_list_create, name='occupation-list-create'),
    path('workers/occupations/<int:pk>/', views.occupation_detail, name='occupation-detail'),
    path('workers/<int:pk>/', views.worker_detail, name='worker-detail'),
    path('workers/<int:pk>/status/', views.worker_status, name='worker-status'),
    path('departments/', views.department_list_create, name='department-list-create'),
    path('departments/<int:pk>/', views.department_detail, name='department-detail'),
]
