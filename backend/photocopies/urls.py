from django.urls import path
from . import views

urlpatterns = [
    path('photocopies/', views.photocopy_list_create, name='photocopy-list-create'),
    path('photocopies/users/', views.photocopy_users, name='photocopy-users'),
    path('photocopies/stats/', views.photocopy_stats, name='photocopy-stats'),
    path('photocopies/audit/', views.photocopy_audit, name='photocopy-audit'),
    path('photocopies/permissions/', views.photocopy_permissions, name='photocopy-permissions'),
    path('photocopies/paper-types/', views.paper_type_list, name='paper-type-list'),
    path('photocopies/<int:pk>/', views.photocopy_detail, name='photocopy-detail'),
]
