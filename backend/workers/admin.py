from django.contrib import admin
from .models import Department, Occupation, Worker


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'grupo', 'created_at']
    search_fields = ['nombre']


@admin.register(Occupation)
class OccupationAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'grupo', 'created_at']
    search_fields = ['nombre']


@admin.register(Worker)
class WorkerAdmin(admin.ModelAdmin):
    list_display = ['nombres', 'apellidos', 'rut', 'ocupacion', 'departamento', 'ropera', 'activo', 'grupo']
    list_filter = ['activo', 'departamento', 'grupo']
    search_fields = ['nombres', 'apellidos', 'rut', 'email']
    readonly_fields = ['created_at', 'updated_at']
