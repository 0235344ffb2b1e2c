from django.contrib import admin
from .models import InventoryCategory, InventoryItem


@admin.register(InventoryCategory)
class InventoryCategoryAdmin(admin.ModelAdmin):
    list_display = ['nombre', 'grupo', 'created_at']
    search_fields = ['nombre']
    ordering = ['nombre']


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['codigo', 'nombre', 'categoria', 'estado', 'seccion', 'posicion', 'trabajador', 'fecha_ingreso']
    list_filter = ['estado', 'categoria', 'seccion', 'fecha_ingreso']
    search_fields = ['codigo', 'nombre', 'seccion']
    ordering = ['seccion', 'posicion']
    readonly_fields = ['created_at', 'updated_at']
