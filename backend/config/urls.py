"""
URL configuration for the copy center backend.

Every app mounts its routes under ``api/v1/``; the admin stays at ``admin/``.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Copy Center Admin Panel"
admin.site.site_title = "Copy Center Admin Portal"
admin.site.index_title = "Workers, inventory and photocopy administration"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.access.urls')),
    path('api/v1/', include('backend.workers.urls')),
    path('api/v1/', include('backend.photocopies.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.reports.urls')),
]
