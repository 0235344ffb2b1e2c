from django.urls import path
from .views import my_permissions, module_list, role_list, role_permissions, my_groups

urlpatterns = [
    path('auth/permissions/', my_permissions, name='my-permissions'),
    path('access/modules/', module_list, name='access-module-list'),
    path('access/roles/', role_list, name='access-role-list'),
    path('access/roles/<int:pk>/permissions/', role_permissions, name='access-role-permissions'),
    path('access/groups/', my_groups, name='access-my-groups'),
]
