from django.db import models
from django.utils import timezone


class InventoryCategory(models.Model):
    """Item type (``tipos_items``), scoped to a work group"""
    nombre = models.CharField(max_length=100)
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.CASCADE, related_name='inventory_categories')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.nombre

    class Meta:
        db_table = 'tipos_items'
        ordering = ['nombre']
        unique_together = [['nombre', 'grupo']]


class InventoryItem(models.Model):
    """Physical item tracked by its CCI code"""
    STATE_CHOICES = [
        ('disponible', 'Available'),
        ('asignado', 'Assigned'),
        ('mantenimiento', 'Maintenance'),
        ('baja', 'Retired'),
    ]

    codigo = models.CharField(max_length=50, unique=True, help_text="CCI code")
    nombre = models.CharField(max_length=150)
    categoria = models.ForeignKey(InventoryCategory, on_delete=models.PROTECT, related_name='items', null=True, blank=True)
    estado = models.CharField(max_length=20, choices=STATE_CHOICES, default='disponible')
    seccion = models.CharField(max_length=100, blank=True, default='')
    trabajador = models.ForeignKey('workers.Worker', on_delete=models.SET_NULL, null=True, blank=True, related_name='inventory_items')
    posicion = models.PositiveIntegerField(default=0)
    fecha_ingreso = models.DateField(default=timezone.localdate)
    grupo = models.ForeignKey('access.WorkGroup', on_delete=models.CASCADE, related_name='inventory_items')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.codigo} - {self.nombre}"

    class Meta:
        db_table = 'items'
        ordering = ['seccion', 'posicion', 'codigo']
        indexes = [
            models.Index(fields=['grupo', 'estado'], name='items_grupo_e_2b7c4d_idx'),
            models.Index(fields=['seccion', 'posicion'], name='items_seccion_9a1e63_idx'),
        ]
