from django.contrib import admin
from .models import PaperType, PhotocopyRecord


@admin.register(PaperType)
class PaperTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'unit_cost', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name', 'description']


@admin.register(PhotocopyRecord)
class PhotocopyRecordAdmin(admin.ModelAdmin):
    list_display = ['id', 'cantidad', 'multiplicador', 'tipo', 'doble_hoja', 'total_hojas', 'usuario', 'grupo', 'registrado_en']
    list_filter = ['tipo', 'doble_hoja', 'tipo_hoja', 'registrado_en']
    search_fields = ['comentario', 'usuario__username', 'usuario__first_name', 'usuario__last_name']
    readonly_fields = ['total_hojas', 'updated_at']
    date_hierarchy = 'registrado_en'
